"""Helpers for building descriptors and ad-hoc rule units in tests."""

from collections.abc import Callable, Iterable
from typing import Any, Optional

from prosecheck.domain.descriptor import Descriptor, PluginBinding, RuleDescriptor
from prosecheck.domain.document import Document
from prosecheck.domain.entities import Message, Severity
from prosecheck.domain.rules import RuleContext, RuleUnit
from prosecheck.infrastructure.plugins.markdown import MarkdownPlugin
from prosecheck.infrastructure.plugins.plain_text import PlainTextPlugin

Evaluate = Callable[[Document, RuleContext], Iterable[Message]]


class FunctionRule(RuleUnit):
    """Rule unit whose evaluate is a plain function of (document, context)."""

    description: str = "test rule"
    fixable: bool = True

    def __init__(
        self,
        rule_id: str,
        func: Evaluate,
        default_severity: Severity = Severity.WARNING,
    ) -> None:
        self.rule_id = rule_id
        self.default_severity = default_severity
        self._func = func

    def validate_options(self, options: Any) -> Any:
        return options

    def evaluate(self, document: Document, context: RuleContext) -> Iterable[Message]:
        return self._func(document, context)


def builtin_plugins() -> list[PluginBinding]:
    return [
        PluginBinding("markdown", MarkdownPlugin()),
        PluginBinding("text", PlainTextPlugin()),
    ]


def descriptor_for(
    *units: Any,
    plugins: Optional[list[PluginBinding]] = None,
    options: Optional[dict[str, Any]] = None,
) -> Descriptor:
    """Descriptor with one RuleDescriptor per unit, in the given order."""
    options = options or {}
    rules = [RuleDescriptor(u.rule_id, u, options=options.get(u.rule_id)) for u in units]
    return Descriptor.build(rules, plugins if plugins is not None else builtin_plugins())


def parse(text: str, kind: str = "markdown", document_id: str = "doc.md") -> Document:
    return descriptor_for().parse(document_id, text, kind)


def evaluate_rule(rule: RuleUnit, text: str, options: Any = None, kind: str = "markdown") -> list[Message]:
    """Run one rule the way the kernel does: options checked first, then evaluate."""
    document = parse(text, kind)
    context = RuleContext(
        rule_id=rule.rule_id,
        options=options,
        settings=rule.validate_options(options),
        severity=rule.default_severity,
    )
    return list(rule.evaluate(document, context))
