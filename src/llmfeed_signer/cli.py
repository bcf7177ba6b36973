"""Command-line interface for LLMFeed key generation, signing and verification.

Example:
    >>> # From terminal:
    >>> # llmfeed-sign --version
    >>> # llmfeed-sign keys generate --out-dir ./keys --name mysite
    >>> # llmfeed-sign feed sign mcp.llmfeed.json -k ./keys/mysite.private.pem \\
    >>> #     --public-url https://example.com/.well-known/public.pem
    >>> # llmfeed-sign feed verify mcp.llmfeed.signed.json -k ./keys/mysite.public.pem
    >>> # llmfeed-sign feed info mcp.llmfeed.signed.json
"""

import json
from pathlib import Path
from typing import Annotated, Any, Optional

import typer

from llmfeed_signer import __version__
from llmfeed_signer.canonical import sha256_hex
from llmfeed_signer.crypto.keys import (
    ENV_PRIVATE_KEY,
    PrivateKeyMaterial,
    generate_key_pair,
    load_private_key_from_env,
    load_private_key_from_file,
    load_public_key_from_file,
    write_key_pair,
)
from llmfeed_signer.crypto.models import SigningOptions, VerificationResult
from llmfeed_signer.crypto.signing import (
    build_canonical_payload,
    sign_feed,
    verify_feed,
    verify_feed_with_hint,
)
from llmfeed_signer.errors import LLMFeedError
from llmfeed_signer.observability import (
    bind_context,
    configure_logging,
    get_logger,
)

app = typer.Typer(help="LLMFeed Ed25519 signing CLI.")

keys_app = typer.Typer(help="Ed25519 key generation.")
app.add_typer(keys_app, name="keys")

feed_app = typer.Typer(help="Feed operations (sign, verify, info).")
app.add_typer(feed_app, name="feed")

DEFAULT_KEYS_DIR = Path("keys")
DEFAULT_KEY_NAME = "llmfeed"

logger = get_logger(__name__)

_verbose: bool = False


def _read_feed(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise typer.BadParameter(f"Feed file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Invalid JSON in feed file: {exc}") from exc
    if not isinstance(data, dict):
        raise typer.BadParameter("Feed must be a JSON object")
    return data


def _split_blocks(blocks: str) -> list[str]:
    return [b.strip() for b in blocks.split(",") if b.strip()]


@keys_app.command("generate")
def keys_generate(
    out_dir: Annotated[
        Path,
        typer.Option("--out-dir", "-o", help="Output directory for key files."),
    ] = DEFAULT_KEYS_DIR,
    name: Annotated[
        str,
        typer.Option("--name", "-n", help="Key file name prefix."),
    ] = DEFAULT_KEY_NAME,
) -> None:
    """Write a new Ed25519 key pair (private PEM/base64 mode 0600, public PEM)."""
    if out_dir.exists() and not out_dir.is_dir():
        raise typer.BadParameter(f"Output path is not a directory: {out_dir}")
    key_pair = generate_key_pair()
    paths = write_key_pair(key_pair, out_dir, name)
    typer.echo(f"Private key: {paths['private_pem']}")
    typer.echo(f"Public key:  {paths['public_pem']}")
    typer.echo(f"Base64 key:  {paths['private_base64']}")
    typer.echo("Algorithm:   Ed25519")
    typer.echo("Format:      PKCS#8 (48 bytes)")
    typer.echo(f"Created:     {key_pair.created_at.isoformat()}")
    typer.echo(f"Keep {paths['private_pem'].name} secret; add keys/*.private.* to .gitignore.")
    typer.echo(f"Use {paths['private_base64'].name} for the {ENV_PRIVATE_KEY} env var.")
    typer.echo(f"Next: publish {paths['public_pem'].name}, e.g. at /.well-known/public.pem")


@feed_app.command("sign")
def feed_sign(
    feed_file: Annotated[Path, typer.Argument(help="Path to the feed JSON file.")],
    key: Annotated[
        Optional[Path],
        typer.Option(
            "--key",
            "-k",
            help=f"Private key file (PEM or base64). Defaults to ${ENV_PRIVATE_KEY}.",
        ),
    ] = None,
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Output path (default: <input>.signed.json)."),
    ] = None,
    in_place: Annotated[
        bool, typer.Option("--in-place", help="Overwrite the input feed file.")
    ] = False,
    public_url: Annotated[
        Optional[str],
        typer.Option("--public-url", help="URL where the public key is hosted."),
    ] = None,
    blocks: Annotated[
        Optional[str],
        typer.Option("--blocks", help="Comma-separated blocks to sign (default: all)."),
    ] = None,
    trust_level: Annotated[
        Optional[str],
        typer.Option("--trust-level", help='Trust level (e.g. "self-signed").'),
    ] = None,
    scope: Annotated[Optional[str], typer.Option("--scope", help="Trust scope.")] = None,
    timestamp: Annotated[
        bool,
        typer.Option("--timestamp/--no-timestamp", help="Add signature.created_at."),
    ] = True,
) -> None:
    """Sign a feed; adds trust and signature blocks."""
    if in_place and out is not None:
        raise typer.BadParameter("--in-place and --out are mutually exclusive")
    bind_context(feed=str(feed_file))
    feed = _read_feed(feed_file)
    try:
        if key is not None:
            if not key.exists():
                raise typer.BadParameter(f"Key file not found: {key}")
            try:
                private_key: PrivateKeyMaterial = load_private_key_from_file(key)
            except (OSError, UnicodeDecodeError) as exc:
                raise typer.BadParameter(f"Cannot read key file {key}: {exc}") from exc
        else:
            private_key = load_private_key_from_env()
        options = SigningOptions(
            signed_blocks=_split_blocks(blocks) if blocks else None,
            public_key_url=public_url,
            trust_level=trust_level,
            scope=scope,
            add_timestamp=timestamp,
        )
        result = sign_feed(feed, private_key, options)
        logger.debug(
            "cli.feed_signed",
            options=options.model_dump(exclude_none=True),
            private_key_source=str(key) if key is not None else ENV_PRIVATE_KEY,
        )
    except LLMFeedError as e:
        typer.echo(f"Signing failed: {e.message}", err=True)
        raise typer.Exit(1) from e

    if in_place:
        output_path = feed_file
    elif out is not None:
        output_path = out
    else:
        output_path = feed_file.with_name(f"{feed_file.stem}.signed.json")
    output_path.write_text(json.dumps(result.feed, indent=2, ensure_ascii=False), encoding="utf-8")

    typer.echo(f"Signed blocks: {', '.join(result.signed_blocks)}")
    typer.echo(f"Payload size:  {len(result.canonical_payload.encode('utf-8'))} bytes")
    typer.echo(f"SHA-256:       {result.payload_hash[:16]}...")
    if _verbose:
        typer.echo(f"Signature:     {result.signature}")
    typer.echo(f"Signed feed written to {output_path}")
    if not public_url:
        typer.echo(
            "Note: no --public-url given; add trust.public_key_hint or re-sign with --public-url.",
            err=True,
        )


def _print_verification(result: VerificationResult, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    elif result.valid:
        typer.echo("Signature VALID")
        typer.echo(f"Signed blocks: {', '.join(result.signed_blocks or [])}")
        typer.echo(f"Payload hash:  {(result.payload_hash or '')[:16]}...")
    else:
        typer.echo("Signature INVALID", err=True)
        typer.echo(f"Error: {result.error}", err=True)


@feed_app.command("verify")
def feed_verify(
    feed_file: Annotated[Path, typer.Argument(help="Path to the signed feed JSON file.")],
    key: Annotated[
        Optional[Path],
        typer.Option(
            "--key",
            "-k",
            help="Public key file (PEM or base64). Defaults to fetching trust.public_key_hint.",
        ),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Output result as JSON.")] = False,
) -> None:
    """Verify a signed feed; exit code 0 when the signature is valid."""
    bind_context(feed=str(feed_file))
    feed = _read_feed(feed_file)
    if key is not None:
        if not key.exists():
            raise typer.BadParameter(f"Key file not found: {key}")
        try:
            public_key = load_public_key_from_file(key)
        except (OSError, UnicodeDecodeError) as exc:
            raise typer.BadParameter(f"Cannot read key file {key}: {exc}") from exc
        except LLMFeedError as e:
            result = VerificationResult(valid=False, error=e.message, error_code=e.code)
        else:
            result = verify_feed(feed, public_key)
    else:
        result = verify_feed_with_hint(feed)
    _print_verification(result, as_json)
    raise typer.Exit(0 if result.valid else 1)


@feed_app.command("info")
def feed_info(
    feed_file: Annotated[Path, typer.Argument(help="Path to the signed feed JSON file.")],
) -> None:
    """Show trust and signature metadata without verifying."""
    feed = _read_feed(feed_file)
    trust = feed.get("trust")
    signature = feed.get("signature")
    if not isinstance(trust, dict) or not isinstance(signature, dict):
        typer.echo("Feed is not signed (missing trust or signature block).", err=True)
        raise typer.Exit(1)
    signed_blocks = trust.get("signed_blocks") or []
    typer.echo(f"Signed blocks: {', '.join(str(b) for b in signed_blocks)}")
    typer.echo(f"Algorithm:     {trust.get('algorithm', 'unknown')}")
    typer.echo(f"Trust level:   {trust.get('trust_level', 'unspecified')}")
    typer.echo(f"Key hint:      {trust.get('public_key_hint', 'none')}")
    typer.echo(f"Signed at:     {signature.get('created_at', 'unknown')}")
    if isinstance(signed_blocks, list) and all(isinstance(b, str) for b in signed_blocks):
        payload_hash = sha256_hex(build_canonical_payload(feed, signed_blocks))
        typer.echo(f"Payload hash:  {payload_hash}")


def _version_callback(value: bool) -> None:
    """Print the version and exit when requested."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


VERSION_OPTION = typer.Option(
    False,
    "--version",
    help="Show llmfeed-signer version and exit.",
    callback=_version_callback,
    is_eager=True,
)


@app.callback()
def cli(
    version: bool = VERSION_OPTION,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
) -> None:
    """LLMFeed signer CLI entrypoint."""
    global _verbose
    _verbose = verbose
    if verbose:
        configure_logging(log_level="DEBUG", force=True)


def main() -> None:
    """Run the llmfeed-sign CLI."""
    app()


if __name__ == "__main__":
    main()
