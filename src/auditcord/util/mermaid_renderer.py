"""Mermaid diagram rendering through the ``mmdc`` command-line tool."""

from __future__ import annotations

import asyncio
import tempfile
from pathlib import Path

from auditcord.util.logger import get_logger

logger = get_logger("mermaid_renderer")


class MermaidRenderError(Exception):
    """The diagram could not be rendered; the message is safe to show users."""


async def render_mermaid(source: str, executable: str = "mmdc", timeout_seconds: float = 30.0) -> bytes:
    """Render Mermaid ``source`` to PNG bytes.

    Args:
        source: Diagram code.
        executable: Mermaid CLI binary name or path.
        timeout_seconds: Upper bound on the CLI run.

    Raises:
        MermaidRenderError: Empty source, missing CLI, non-zero exit,
            timeout, or no output file.
    """
    if not source or not source.strip():
        raise MermaidRenderError("No diagram code provided.")

    with tempfile.TemporaryDirectory(prefix="auditcord-mermaid-") as workdir:
        input_path = Path(workdir) / "diagram.mmd"
        output_path = Path(workdir) / "diagram.png"
        input_path.write_text(source.strip(), encoding="utf-8")

        try:
            process = await asyncio.create_subprocess_exec(
                executable, "-i", str(input_path), "-o", str(output_path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            logger.error("Mermaid CLI %r not found", executable)
            raise MermaidRenderError(f"Renderer `{executable}` is not installed.") from exc

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout_seconds)
        except asyncio.TimeoutError as exc:
            process.kill()
            await process.wait()
            raise MermaidRenderError(f"Rendering timed out after {timeout_seconds:.0f}s.") from exc

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()[:500]
            logger.warning("mmdc exited with %s: %s", process.returncode, detail)
            raise MermaidRenderError(detail or f"Renderer exited with code {process.returncode}.")

        if not output_path.exists():
            raise MermaidRenderError("Renderer produced no image.")
        return output_path.read_bytes()
