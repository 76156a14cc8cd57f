"""Core tree, storage and error types"""
