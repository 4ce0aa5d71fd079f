"""Descriptor: the validated, immutable composition of rules and plugins for one session."""

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Optional, Union

from prosecheck.domain.document import Document, Node, RangeMap, TextRange
from prosecheck.domain.entities import Severity
from prosecheck.domain.errors import (
    DescriptorValidationError,
    DuplicatePluginError,
    InvalidOptionsError,
    ParseError,
    UnsupportedKindError,
)
from prosecheck.domain.plugins import FormatPlugin
from prosecheck.domain.rules import RuleContext, RuleUnit, SessionRule

logger = logging.getLogger(__name__)

AnyRule = Union[RuleUnit, SessionRule]


@dataclass(frozen=True)
class RuleDescriptor:
    """
    One enabled rule. The unit is referenced, not owned: the same instance may
    appear in several descriptors. ``options`` reaches the unit verbatim;
    ``settings`` is what the unit's option check returned.
    """

    rule_id: str
    unit: AnyRule
    options: Any = None
    severity: Optional[Severity] = None
    settings: Any = field(default=None, compare=False)

    @property
    def effective_severity(self) -> Severity:
        return self.severity or self.unit.default_severity

    @property
    def is_session_rule(self) -> bool:
        return not isinstance(self.unit, RuleUnit) and isinstance(self.unit, SessionRule)

    def context(self) -> RuleContext:
        return RuleContext(
            rule_id=self.rule_id,
            options=self.options,
            settings=self.settings,
            severity=self.effective_severity,
        )


@dataclass(frozen=True)
class PluginBinding:
    plugin_id: str
    plugin: FormatPlugin


@dataclass(frozen=True)
class Descriptor:
    """Created once per session by ``build``; shared read-only afterwards."""

    rules: tuple[RuleDescriptor, ...]
    plugins: tuple[PluginBinding, ...]
    config: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    _rule_index: Mapping[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index = {rd.rule_id: position for position, rd in enumerate(self.rules)}
        object.__setattr__(self, "_rule_index", MappingProxyType(index))

    @classmethod
    def build(
        cls,
        rules: Iterable[RuleDescriptor],
        plugins: Iterable[PluginBinding],
        config: Optional[Mapping[str, Any]] = None,
    ) -> "Descriptor":
        """
        Validate and freeze a composition.

        Raises:
            DuplicatePluginError: a kind is claimed by two plugins (carries every violation).
            DescriptorValidationError: any other violation; all of them are listed.
        """
        rules = tuple(rules)
        plugins = tuple(plugins)
        violations: list[str] = []

        rule_counts = Counter(rd.rule_id for rd in rules)
        for rule_id, count in rule_counts.items():
            if count > 1:
                violations.append(f"duplicate rule id '{rule_id}' ({count} times)")

        prepared: list[RuleDescriptor] = []
        for rd in rules:
            if not rd.rule_id:
                violations.append("rule id must be a non-empty string")
            if not isinstance(rd.unit, (RuleUnit, SessionRule)):
                violations.append(
                    f"rule '{rd.rule_id}': {type(rd.unit).__name__} implements neither evaluate nor evaluate_batch"
                )
                prepared.append(rd)
                continue
            try:
                settings = rd.unit.validate_options(rd.options)
            except InvalidOptionsError as exc:
                violations.append(f"rule '{rd.rule_id}': invalid options: {exc.reason}")
                prepared.append(rd)
                continue
            except Exception as exc:
                violations.append(f"rule '{rd.rule_id}': option check failed: {exc}")
                prepared.append(rd)
                continue
            prepared.append(
                RuleDescriptor(
                    rule_id=rd.rule_id,
                    unit=rd.unit,
                    options=rd.options,
                    severity=rd.severity,
                    settings=settings,
                )
            )

        plugin_counts = Counter(b.plugin_id for b in plugins)
        for plugin_id, count in plugin_counts.items():
            if count > 1:
                violations.append(f"duplicate plugin id '{plugin_id}' ({count} times)")
        if not plugins:
            violations.append("at least one format plugin is required")
        well_formed = [b for b in plugins if isinstance(b.plugin, FormatPlugin)]
        for binding in plugins:
            if binding not in well_formed:
                violations.append(
                    f"plugin '{binding.plugin_id}': {type(binding.plugin).__name__} is not a format plugin"
                )

        conflicts = cls._kind_conflicts(well_formed)
        violations.extend(conflicts)

        if violations:
            error_cls = DuplicatePluginError if conflicts else DescriptorValidationError
            raise error_cls(violations)

        frozen_config = MappingProxyType(dict(config or {}))
        logger.debug(
            "Descriptor built: rules=%s plugins=%s",
            [rd.rule_id for rd in prepared],
            [b.plugin_id for b in plugins],
        )
        return cls(rules=tuple(prepared), plugins=plugins, config=frozen_config)

    @staticmethod
    def _kind_conflicts(bindings: list[PluginBinding]) -> list[str]:
        conflicts: list[str] = []
        for i, first in enumerate(bindings):
            for second in bindings[i + 1:]:
                claimed = [k for k in first.plugin.kinds if second.plugin.match(k)]
                claimed += [
                    k for k in second.plugin.kinds if first.plugin.match(k) and k not in claimed
                ]
                for kind in claimed:
                    conflicts.append(
                        f"kind '{kind}' is claimed by plugins '{first.plugin_id}' and '{second.plugin_id}'"
                    )
        return conflicts

    # -- rules ---------------------------------------------------------------

    @property
    def document_rules(self) -> tuple[RuleDescriptor, ...]:
        return tuple(rd for rd in self.rules if not rd.is_session_rule)

    @property
    def session_rules(self) -> tuple[RuleDescriptor, ...]:
        return tuple(rd for rd in self.rules if rd.is_session_rule)

    def rule_order(self, rule_id: str) -> int:
        """Execution position of a rule; ids not in the descriptor sort after every rule."""
        return self._rule_index.get(rule_id, len(self.rules))

    # -- plugins -------------------------------------------------------------

    @property
    def kinds(self) -> tuple[str, ...]:
        return tuple(kind for b in self.plugins for kind in b.plugin.kinds)

    def binding_for(self, kind: str) -> PluginBinding:
        for binding in self.plugins:
            if binding.plugin.match(kind):
                return binding
        raise UnsupportedKindError(kind)

    def plugin_for(self, kind: str) -> FormatPlugin:
        return self.binding_for(kind).plugin

    def kind_for_extension(self, extension: str) -> Optional[str]:
        """Primary kind of the plugin declaring ``extension`` (e.g. '.md'), if any."""
        extension = extension.lower()
        for binding in self.plugins:
            if extension in binding.plugin.extensions and binding.plugin.kinds:
                return binding.plugin.kinds[0]
        return None

    def parse(self, document_id: str, source_text: str, kind: str) -> Document:
        """
        Parse text with the plugin bound to ``kind``.

        Raises:
            UnsupportedKindError: no plugin matches ``kind``.
            ParseError: the plugin rejected the text, crashed, or returned a
                tree that does not span the whole text.
        """
        binding = self.binding_for(kind)
        try:
            tree = binding.plugin.parse(source_text)
        except ParseError:
            raise
        except Exception as exc:
            raise ParseError(f"Plugin '{binding.plugin_id}' failed: {exc}") from exc
        if not isinstance(tree, Node) or tree.range != TextRange(0, len(source_text)):
            raise ParseError(
                f"Plugin '{binding.plugin_id}' produced a tree that does not span the source text"
            )
        return Document(
            id=document_id,
            source_text=source_text,
            tree=tree,
            kind=kind,
            range_map=RangeMap(source_text),
        )

    def serialize(self, document: Document) -> str:
        return self.plugin_for(document.kind).serialize(document.tree)
