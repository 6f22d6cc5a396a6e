"""Worker script composition: user handler fragment + bundled base fragment."""

from dataclasses import dataclass
import hashlib
from pathlib import Path

BASE_SCRIPT_PATH = Path(__file__).resolve().parent / "scripts" / "webhook.js"

# Authenticates and validates GitHub deliveries, then calls the handler's handle().
BASE_SCRIPT: str = BASE_SCRIPT_PATH.read_text(encoding="utf-8")


@dataclass(frozen=True)
class ComposedScript:
    """Deployable worker script and the SHA-256 hex digest of its UTF-8 bytes."""

    content: str
    sha256: str


def read_handler_script(path: str | Path) -> str:
    """Read the handler fragment; an unreadable file is a fatal config error."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SystemExit(f"failed to read post auth handler script file {path}: {e}") from e


def compose_worker_script(handler_script: str, base_script: str = BASE_SCRIPT) -> ComposedScript:
    """Prepend the handler to the base script and hash the result.

    The handler goes first so its definitions exist before the base
    script's fetch entry point calls handle().
    """
    content = f"{handler_script}\n{base_script}"
    return ComposedScript(
        content=content,
        sha256=hashlib.sha256(content.encode("utf-8")).hexdigest(),
    )
