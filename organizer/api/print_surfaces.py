"""Browser-backed print surfaces.

A surface is a hidden iframe in the client page that loads the rebuilt PDF
from this service. The page reports when the frame has loaded, waits for the
service to say "print", and reports again when the dialog closes.
"""
import asyncio
from typing import Dict

from organizer.core.export import PrintHost, PrintSurface

PRINT_SURFACES: Dict[str, "WebPrintSurface"] = {}


class WebPrintSurface(PrintSurface):
    def __init__(self, data: bytes, workspace_id: str) -> None:
        super().__init__(data)
        self.workspace_id = workspace_id
        self._dialog_requested = asyncio.Event()

    async def wait_print_signal(self, timeout: float) -> bool:
        """True once the dialog may be opened; False on timeout or release."""
        try:
            await asyncio.wait_for(self._dialog_requested.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return self.dialog_opened and not self.released

    def _show_dialog(self) -> None:
        self._dialog_requested.set()

    def _on_release(self) -> None:
        PRINT_SURFACES.pop(self.surface_id, None)
        self._dialog_requested.set()


class WebPrintHost(PrintHost):
    def __init__(self, workspace_id: str) -> None:
        self.workspace_id = workspace_id

    def create_surface(self, data: bytes) -> WebPrintSurface:
        surface = WebPrintSurface(data, self.workspace_id)
        PRINT_SURFACES[surface.surface_id] = surface
        return surface


PRINT_PAGE = """<!doctype html>
<html>
<head><meta charset="utf-8"><title>Print reordered PDF</title></head>
<body>
<iframe id="surface" src="/print/{surface_id}/document" style="display:none"></iframe>
<script>
  const base = "/print/{surface_id}";
  const frame = document.getElementById("surface");
  frame.onload = async () => {{
    const res = await fetch(base + "/loaded", {{ method: "POST" }});
    const body = res.ok ? await res.json() : {{ print: false }};
    if (body.print) {{
      frame.contentWindow.focus();
      frame.contentWindow.print();
    }}
    fetch(base + "/dismissed", {{ method: "POST" }});
  }};
</script>
</body>
</html>
"""
