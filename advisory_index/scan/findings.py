"""
Vulnerability findings produced by a scan engine.

The scan engine itself (SBOM generation, vulnerability matching) lives
elsewhere; this module only models its output so findings can be filtered
against advisories and written back out.
"""
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Package:
    """The package a finding was matched against."""
    id: str
    name: str
    version: str = ""
    type: str = ""
    location: str = ""


@dataclass(frozen=True)
class Vulnerability:
    id: str
    severity: str = "Unknown"
    aliases: List[str] = field(default_factory=list)
    fixed_version: Optional[str] = None


@dataclass(frozen=True)
class Finding:
    package: Package
    vulnerability: Vulnerability

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Finding":
        """
        Build a finding from scan engine JSON.

        Raises:
            ValueError: If the package or vulnerability identity is missing
        """
        pkg = raw.get("package") or {}
        vuln = raw.get("vulnerability") or {}
        if not pkg.get("name"):
            raise ValueError("finding is missing package.name")
        if not vuln.get("id"):
            raise ValueError("finding is missing vulnerability.id")

        return cls(
            package=Package(
                id=pkg.get("id") or pkg["name"],
                name=pkg["name"],
                version=pkg.get("version", ""),
                type=pkg.get("type", ""),
                location=pkg.get("location", ""),
            ),
            vulnerability=Vulnerability(
                id=vuln["id"],
                severity=vuln.get("severity", "Unknown"),
                aliases=list(vuln.get("aliases") or []),
                fixed_version=vuln.get("fixed_version") or None,
            ),
        )


@dataclass
class Result:
    """All findings from scanning one target (an APK or SBOM)."""
    target: str
    findings: List[Finding] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "findings": [f.to_dict() for f in self.findings],
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Result":
        return cls(
            target=raw.get("target", ""),
            findings=[Finding.from_dict(f) for f in raw.get("findings") or []],
        )
