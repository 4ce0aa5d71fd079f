"""Result formatters - live in infrastructure (terminal colors, XML, JSON)."""

import json
import xml.etree.ElementTree as ET
from collections.abc import Callable
from typing import Optional

import typer

from prosecheck.domain.constants import TOOL_NAME
from prosecheck.domain.entities import BatchResult, DocumentResult, Message, Severity
from prosecheck.interface.reporters import ResultFormatter

_SEVERITY_COLORS: dict[Severity, str] = {
    Severity.ERROR: typer.colors.RED,
    Severity.WARNING: typer.colors.YELLOW,
    Severity.INFO: typer.colors.BLUE,
}


class TextHelpers:
    """Small text helpers shared by the formatters."""

    @staticmethod
    def line_col(message: Message) -> tuple[int, int]:
        if message.loc is None:
            return 1, 1
        return message.loc.start.line, message.loc.start.column

    @staticmethod
    def plural(count: int, noun: str, plural: Optional[str] = None) -> str:
        return f"{count} {noun if count == 1 else (plural or noun + 's')}"


class StylishFormatter(ResultFormatter):
    """Grouped by file, aligned columns, colored severities, summary footer."""

    name = "stylish"

    def __init__(self, color: bool = False) -> None:
        self.color = color

    def _style(self, text: str, **styles: object) -> str:
        return typer.style(text, **styles) if self.color else text

    def render(self, batch: BatchResult) -> str:
        out: list[str] = []
        for result in batch:
            if not result.messages:
                continue
            out.append(self._style(result.document_id, underline=True))
            rows = []
            for m in result.messages:
                line, col = TextHelpers.line_col(m)
                rows.append((f"{line}:{col}", m.severity, m.text, m.rule_id))
            pos_width = max(len(r[0]) for r in rows)
            sev_width = max(len(r[1].value) for r in rows)
            text_width = max(len(r[2]) for r in rows)
            for position, severity, text, rule_id in rows:
                sev = self._style(severity.value.ljust(sev_width), fg=_SEVERITY_COLORS[severity])
                rule = self._style(rule_id, dim=True)
                out.append(f"  {position.rjust(pos_width)}  {sev}  {text.ljust(text_width)}  {rule}")
            out.append("")

        total = batch.message_count
        if total:
            summary = (
                f"{TextHelpers.plural(total, 'problem')} ({TextHelpers.plural(batch.error_count, 'error')}, "
                f"{TextHelpers.plural(batch.warning_count, 'warning')})"
            )
            fg = typer.colors.RED if batch.error_count else typer.colors.YELLOW
            out.append(self._style(f"✖ {summary}", fg=fg, bold=True))
            fixable = sum(1 for r in batch for m in r.messages if m.fixable)
            if fixable:
                out.append(f"  {TextHelpers.plural(fixable, 'problem')} potentially fixable with the `--fix` option.")
        if batch.applied_count:
            out.append(
                f"{TextHelpers.plural(batch.applied_count, 'fix', 'fixes')} applied to {TextHelpers.plural(len(batch.fixed_documents), 'file')}."
            )
        return "\n".join(out)


class CompactFormatter(ResultFormatter):
    """One line per message: ``path:line:col: severity message [rule]``."""

    name = "compact"

    def render(self, batch: BatchResult) -> str:
        lines = []
        for result in batch:
            for m in result.messages:
                line, col = TextHelpers.line_col(m)
                lines.append(f"{result.document_id}:{line}:{col}: {m.severity.value} {m.text} [{m.rule_id}]")
        if lines:
            lines.append("")
            lines.append(TextHelpers.plural(batch.message_count, "problem"))
        return "\n".join(lines)


class JsonFormatter(ResultFormatter):
    name = "json"

    def render(self, batch: BatchResult) -> str:
        return json.dumps(batch.to_dict(), indent=2, ensure_ascii=False)


class CheckstyleFormatter(ResultFormatter):
    name = "checkstyle"

    def render(self, batch: BatchResult) -> str:
        root = ET.Element("checkstyle", version="4.3")
        for result in batch:
            file_el = ET.SubElement(root, "file", name=result.document_id)
            for m in result.messages:
                line, col = TextHelpers.line_col(m)
                ET.SubElement(
                    file_el,
                    "error",
                    line=str(line),
                    column=str(col),
                    severity=m.severity.value,
                    message=m.text,
                    source=f"{TOOL_NAME}.rules.{m.rule_id}",
                )
        return '<?xml version="1.0" encoding="utf-8"?>\n' + ET.tostring(root, encoding="unicode")


class JUnitFormatter(ResultFormatter):
    """One testsuite per document; each message is a failing testcase."""

    name = "junit"

    def render(self, batch: BatchResult) -> str:
        root = ET.Element("testsuites")
        for result in batch:
            suite = ET.SubElement(
                root,
                "testsuite",
                package=TOOL_NAME,
                time="0",
                tests=str(max(len(result.messages), 1)),
                errors=str(len(result.messages)),
                name=result.document_id,
            )
            if not result.messages:
                ET.SubElement(suite, "testcase", time="0", name=result.document_id)
                continue
            for m in result.messages:
                line, col = TextHelpers.line_col(m)
                case = ET.SubElement(
                    suite, "testcase", time="0", name=f"{TOOL_NAME}.rules.{m.rule_id}"
                )
                failure = ET.SubElement(case, "failure", message=m.text)
                failure.text = f"line {line}, col {col}, {m.severity.value.capitalize()} - {m.text} ({m.rule_id})"
        return '<?xml version="1.0" encoding="utf-8"?>\n' + ET.tostring(root, encoding="unicode")


class TapFormatter(ResultFormatter):
    """Test Anything Protocol: one test point per document, messages as YAML diagnostics."""

    name = "tap"

    def render(self, batch: BatchResult) -> str:
        lines = ["TAP version 13", f"1..{len(batch)}"]
        for number, result in enumerate(batch, start=1):
            lines.extend(self._test_point(number, result))
        return "\n".join(lines)

    @staticmethod
    def _test_point(number: int, result: DocumentResult) -> list[str]:
        if not result.messages:
            return [f"ok {number} - {result.document_id}"]
        lines = [f"not ok {number} - {result.document_id}", "  ---", "  messages:"]
        for m in result.messages:
            line, col = TextHelpers.line_col(m)
            lines.append(f"    - message: {json.dumps(m.text, ensure_ascii=False)}")
            lines.append(f"      severity: {m.severity.value}")
            lines.append(f"      ruleId: {m.rule_id}")
            lines.append(f"      line: {line}")
            lines.append(f"      column: {col}")
        lines.append("  ...")
        return lines


class FormatterFactory:
    """Name -> formatter lookup used by the CLI."""

    _FORMATTERS: dict[str, Callable[[], ResultFormatter]] = {
        StylishFormatter.name: StylishFormatter,
        CompactFormatter.name: CompactFormatter,
        JsonFormatter.name: JsonFormatter,
        CheckstyleFormatter.name: CheckstyleFormatter,
        JUnitFormatter.name: JUnitFormatter,
        TapFormatter.name: TapFormatter,
    }

    @classmethod
    def names(cls) -> tuple[str, ...]:
        return tuple(cls._FORMATTERS)

    @classmethod
    def create(cls, name: str, color: Optional[bool] = None) -> ResultFormatter:
        """Raises ValueError for an unknown formatter name."""
        if name not in cls._FORMATTERS:
            raise ValueError(f"Unknown formatter '{name}' (available: {', '.join(cls._FORMATTERS)})")
        if name == StylishFormatter.name:
            return StylishFormatter(color=bool(color))
        return cls._FORMATTERS[name]()
