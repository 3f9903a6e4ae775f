"""SheetExporter: typesets jianpu sheet documents into SVG or HTML files."""

from __future__ import annotations

import json
from typing import Any, Final

from jianpu.layout import render
from jianpu.render_models import RenderResult, pre_render_sheet
from jianpu.sheet_models import Options, Sheet
from jianpu.sheet_renderers import HtmlRenderer, SheetRenderer, SvgRenderer

SUPPORTED_FORMATS: Final[set[str]] = {"svg", "html"}


class SheetExporter:
    """
    Convert a jianpu sheet document into page output via a pluggable renderer.

    Supported formats:
    - ``svg``: one standalone SVG page.
    - ``html``: the SVG page inlined in a self-contained HTML file.
    """

    def __init__(self, output_format: str = "svg", options: Options | None = None) -> None:
        normalized = output_format.strip().lower()
        if normalized not in SUPPORTED_FORMATS:
            supported = ", ".join(sorted(SUPPORTED_FORMATS))
            raise ValueError(f"Unsupported output format '{output_format}'. Use one of: {supported}.")
        self.output_format = normalized
        self.options = options or Options()
        self.renderer = self._build_renderer(normalized)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_renderer(self, output_format: str) -> SheetRenderer:
        if output_format == "html":
            return HtmlRenderer()
        return SvgRenderer()

    def _read_document(self, sheet_path: str) -> dict[str, Any]:
        with open(sheet_path, encoding="utf-8") as fh:
            try:
                data = json.load(fh)
            except json.JSONDecodeError as exc:
                raise ValueError(f"'{sheet_path}' is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError(f"'{sheet_path}' does not contain a sheet object.")
        return data

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self, sheet_path: str) -> Sheet:
        """
        Read a sheet document from a JSON file.

        Raises:
            ValueError: If the file is not a valid sheet document.
            OSError: If the file cannot be read.
        """
        return Sheet.from_dict(self._read_document(sheet_path))

    def typeset(self, sheet: Sheet) -> tuple[str, RenderResult]:
        """
        Lay out a sheet and render it in the selected format.

        Raises:
            SheetValidationError: If the sheet lacks its opening key or time signature.
        """
        result = render(pre_render_sheet(sheet), self.options)
        content = self.renderer.render(title=sheet.info.title, result=result, style=self.options.style)
        return content, result

    def export(self, sheet_path: str, output_path: str) -> RenderResult:
        """
        Typeset a sheet file and write the rendered page to disk.

        Returns:
            The layout result, whose ``logs`` list every placement problem.

        Raises:
            ValueError: If the sheet cannot be read or laid out.
            OSError: If a file cannot be read or written.
        """
        content, result = self.typeset(self.load(sheet_path))

        with open(output_path, "w", encoding="utf-8") as fh:
            fh.write(content)
        return result
