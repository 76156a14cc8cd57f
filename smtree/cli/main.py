"""
smtree CLI - build sparse Merkle trees and produce/check proofs from files.

Main entry point for all CLI commands.
"""

import json
from pathlib import Path
from typing import Dict, Union

import click

from smtree.core.errors import SMTError
from smtree.utils.logger import get_logger, setup_logging

logger = get_logger("cli")


def load_leaves(path: Path) -> Dict[int, Union[str, int]]:
    """
    Read leaves from a JSON file.

    Accepts a list (leaf i at index i) or an object mapping decimal index
    strings to values. Values must be strings or non-negative integers.
    """
    data = json.loads(path.read_text())
    if isinstance(data, list):
        items = list(enumerate(data))
    elif isinstance(data, dict):
        items = [(int(k), v) for k, v in data.items()]
    else:
        raise click.BadParameter("leaves file must hold a JSON list or object")

    leaves = {}
    for index, value in items:
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise click.BadParameter(f"leaf {index}: expected string or integer, got {value!r}")
        leaves[index] = value
    return leaves


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="JSON/TOML config file")
@click.option("--height", type=int, default=None, help="Tree height (overrides config)")
@click.option("--hasher", default=None, help="Hasher name: poseidon, sha256, keccak256")
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx, debug, config_path, height, hasher):
    """Sparse Merkle tree with historical proofs"""
    from dataclasses import replace

    from smtree.core.config import load_config

    try:
        config = load_config(config_path)
        overrides = {}
        if height is not None:
            overrides["height"] = height
        if hasher is not None:
            overrides["hasher"] = hasher
        if overrides:
            config = replace(config, **overrides)
    except SMTError as e:
        raise click.UsageError(str(e)) from e

    setup_logging(
        level="DEBUG" if debug else config.log_level,
        log_dir=str(config.log_dir) if config.log_dir else None,
        log_to_file=config.log_dir is not None,
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# =============================================================================
# Tree Commands
# =============================================================================


@cli.command("zero-hashes")
@click.pass_context
def zero_hashes(ctx):
    """Print the empty-subtree hash for every depth"""
    from smtree.crypto import bytes_to_hex

    config = ctx.obj["config"]
    tree = config.build_tree()

    click.echo(f"Zero hashes (height={config.height}, hasher={config.hasher})")
    for depth, h in enumerate(tree.tree.zero_hashes):
        click.echo(f"  {depth:>3}: {bytes_to_hex(h)}")


@cli.command("build")
@click.argument("leaves_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--prove", "prove_index", type=int, default=None, help="Leaf index to prove")
@click.option("--at-root", default=None, help="Historical root (0x...) to prove against")
@click.option("--history", is_flag=True, help="Print the root after every insertion")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write the proof JSON here")
@click.pass_context
def build(ctx, leaves_file, prove_index, at_root, history, output):
    """Insert leaves from a JSON file and print the root"""
    from smtree.crypto import bytes_to_hex, hex_to_bytes

    config = ctx.obj["config"]
    tree = config.build_tree()

    try:
        leaves = load_leaves(leaves_file)
        for index, value in sorted(leaves.items()):
            tree.update(index, value)

        if history:
            for i, root in enumerate(tree.root_history):
                click.echo(f"  root[{i}]: {bytes_to_hex(root)}")
        click.echo(f"root: {bytes_to_hex(tree.get_root())}")

        if prove_index is not None:
            if at_root:
                proof = tree.prove_with_given_root(hex_to_bytes(at_root), prove_index)
            else:
                proof = tree.prove(prove_index)
            if output:
                output.write_text(proof.to_json())
                click.echo(f"proof written to {output}")
            else:
                click.echo(proof.to_json())
    except (SMTError, ValueError) as e:
        logger.debug(f"build failed: {e!r}")
        raise click.ClickException(str(e)) from e


@cli.command("verify")
@click.argument("proof_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--index", required=True, type=int, help="Leaf index")
@click.option("--leaf", required=True, help="Leaf value")
@click.option("--int-leaf", is_flag=True, help="Interpret --leaf as an integer")
@click.option("--root", required=True, help="Expected root (0x...)")
@click.pass_context
def verify(ctx, proof_file, index, leaf, int_leaf, root):
    """Check a proof file against a root"""
    from smtree.core.tree import MerkleProof, usize_le_bits
    from smtree.core.errors import VerificationFailedError
    from smtree.crypto import hex_to_bytes
    from smtree.utils.validation import validate_leaf_index

    config = ctx.obj["config"]
    hasher = config.make_hasher()

    try:
        proof = MerkleProof.from_json(proof_file.read_text())
        ok, err = validate_leaf_index(index, proof.height)
        if not ok:
            raise click.BadParameter(err, param_hint="--index")
        value = int(leaf) if int_leaf else leaf
        proof.verify(value, usize_le_bits(index, proof.height), hex_to_bytes(root), hasher)
    except VerificationFailedError as e:
        click.echo(f"❌ {e}")
        ctx.exit(1)
    except (SMTError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    click.echo("✅ Proof valid")


if __name__ == "__main__":
    cli()
