from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from .core.dest import split_dest
from .core.model import LinkResult, Note, Range, ScanResult


@dataclass
class Finding:
    severity: str  # "warn" | "error"
    message: str
    path: str
    range: Range | None = None
    rule: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule": self.rule,
            "severity": self.severity,
            "message": self.message,
            "path": self.path,
            "range": self.range.to_dict() if self.range else None,
        }


class LintRule(Protocol):
    id: str

    def check(self, scan: ScanResult, links: LinkResult) -> list[Finding]:
        pass


class UnresolvedLinksRule:
    id = "unresolved-links"

    def check(self, scan: ScanResult, links: LinkResult) -> list[Finding]:
        return [
            Finding("error", f"Unresolved link {ref.dest!r}", ref.path, ref.range, self.id)
            for ref in links.unresolved
        ]


class UnknownAnchorRule:
    id = "unknown-anchor"

    def check(self, scan: ScanResult, links: LinkResult) -> list[Finding]:
        out: list[Finding] = []
        for link in links.links:
            if not isinstance(link.target, Note):
                continue
            _, nested_headings, block_id = split_dest(link.source.dest)
            # Heading or block part given, but the link fell back to the note
            if nested_headings or block_id:
                anchor = f"^{block_id}" if block_id else "#".join(nested_headings or [])
                out.append(
                    Finding(
                        "warn",
                        f"Unknown anchor {anchor!r} in {link.target.path}",
                        link.source.path,
                        link.source.range,
                        self.id,
                    )
                )
        return out


DEFAULT_RULES: tuple[LintRule, ...] = (UnresolvedLinksRule(), UnknownAnchorRule())


def lint_vault(
    scan: ScanResult, links: LinkResult, rules: Sequence[LintRule] = DEFAULT_RULES
) -> list[Finding]:
    findings: list[Finding] = []
    for rule in rules:
        findings.extend(rule.check(scan, links))
    return findings
