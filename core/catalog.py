"""
    Requirement catalog: an ordered, immutable name -> Requirement mapping.

    All validation happens at construction, so a malformed catalog fails loudly
    before anything is probed.
"""
import json
from pathlib import Path

from core.errors import CatalogError, VersionParseError
from core.models import Fact, Requirement, RequirementKind
from core.version import parse_version

# Which kinds make sense for each fact
_NUMERIC_FACTS = {Fact.OS_BUILD, Fact.RAM_GB, Fact.CPU_CORES, Fact.DISK_FREE_GB}
_VERSIONED_FACTS = {Fact.RUNTIME, Fact.PACKAGE_MANAGER, Fact.VCS, Fact.COMPILER}

ALLOWED_KINDS = {
    **{fact: {RequirementKind.MIN_NUMERIC, RequirementKind.PRESENCE} for fact in _NUMERIC_FACTS},
    **{fact: {RequirementKind.MIN_VERSION, RequirementKind.PRESENCE} for fact in _VERSIONED_FACTS},
    Fact.OS_SUPPORTED: {RequirementKind.PRESENCE},
    Fact.TOOLS: {RequirementKind.TOOL_LIST},
}


def _check_threshold(name, kind, threshold):
    if kind is RequirementKind.MIN_NUMERIC:
        # bool is an int subclass; True is not a meaningful minimum
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
            raise CatalogError(f"{name}: minimum-numeric threshold must be a number, got {threshold!r}")
        return threshold

    if kind is RequirementKind.MIN_VERSION:
        try:
            parse_version(threshold)
        except VersionParseError as e:
            raise CatalogError(f"{name}: {e}") from e
        return threshold.strip()

    if kind is RequirementKind.PRESENCE:
        if not isinstance(threshold, bool):
            raise CatalogError(f"{name}: boolean-presence threshold must be true/false, got {threshold!r}")
        return threshold

    # TOOL_LIST
    if isinstance(threshold, str) or not isinstance(threshold, (list, tuple)):
        raise CatalogError(f"{name}: string-list threshold must be a list of tool names, got {threshold!r}")
    tools = tuple(threshold)
    if not all(isinstance(t, str) and t.strip() for t in tools):
        raise CatalogError(f"{name}: string-list entries must be non-empty strings")
    return tuple(t.strip() for t in tools)


def make_requirement(name, kind, fact, threshold, mandatory=True) -> Requirement:
    """Build a validated Requirement, coercing kind/fact from their string values."""
    if not isinstance(name, str) or not name.strip():
        raise CatalogError(f"requirement name must be a non-empty string, got {name!r}")
    name = name.strip()

    try:
        kind = RequirementKind(kind)
    except ValueError:
        raise CatalogError(f"{name}: unknown requirement kind {kind!r}") from None
    try:
        fact = Fact(fact)
    except ValueError:
        raise CatalogError(f"{name}: unknown fact {fact!r}") from None

    if kind not in ALLOWED_KINDS[fact]:
        raise CatalogError(f"{name}: kind {kind.value!r} cannot be checked against fact {fact.value!r}")
    if not isinstance(mandatory, bool):
        raise CatalogError(f"{name}: mandatory must be true/false, got {mandatory!r}")

    return Requirement(
        name=name,
        kind=kind,
        fact=fact,
        threshold=_check_threshold(name, kind, threshold),
        mandatory=mandatory,
    )


class Catalog:
    """Ordered requirements; iteration order is report row order."""

    def __init__(self, requirements):
        self._requirements: dict[str, Requirement] = {}
        for req in requirements:
            if not isinstance(req, Requirement):
                raise CatalogError(f"catalog entries must be Requirement objects, got {type(req).__name__}")
            # re-run validation so hand-built Requirement objects get the same checks
            req = make_requirement(req.name, req.kind, req.fact, req.threshold, req.mandatory)
            if req.name in self._requirements:
                raise CatalogError(f"duplicate requirement name: {req.name!r}")
            self._requirements[req.name] = req

    @classmethod
    def from_entries(cls, entries) -> "Catalog":
        """
        Build from plain data, e.g. a parsed JSON list:

          [{"name": "RAM (GB)", "kind": "minimum-numeric", "fact": "ram_gb",
            "threshold": 4, "mandatory": true}, ...]
        """
        if not isinstance(entries, list):
            raise CatalogError("catalog must be a list of requirement entries")

        requirements = []
        for i, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise CatalogError(f"entry {i} must be an object")
            missing = [k for k in ("name", "kind", "fact", "threshold") if k not in entry]
            if missing:
                raise CatalogError(f"entry {i} is missing {', '.join(missing)}")
            requirements.append(make_requirement(
                entry["name"], entry["kind"], entry["fact"], entry["threshold"],
                entry.get("mandatory", True),
            ))
        return cls(requirements)

    def __iter__(self):
        return iter(self._requirements.values())

    def __len__(self):
        return len(self._requirements)

    def __getitem__(self, name) -> Requirement:
        return self._requirements[name]

    def __contains__(self, name):
        return name in self._requirements

    def names(self) -> list[str]:
        return list(self._requirements)

    def facts(self) -> set[Fact]:
        return {req.fact for req in self._requirements.values()}


def load_catalog(path: str | Path) -> Catalog:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"cannot read catalog {path}: {type(e).__name__}: {e}") from e
    return Catalog.from_entries(data)


def default_catalog() -> Catalog:
    """Prerequisites of the Windows build pipeline (PyInstaller/Nuitka/Cython/MSVC/Sphinx/PyArmor)."""
    return Catalog([
        make_requirement("Supported OS", RequirementKind.PRESENCE, Fact.OS_SUPPORTED, True),
        make_requirement("OS build", RequirementKind.MIN_NUMERIC, Fact.OS_BUILD, 17763),
        make_requirement("RAM (GB)", RequirementKind.MIN_NUMERIC, Fact.RAM_GB, 4),
        make_requirement("CPU cores", RequirementKind.MIN_NUMERIC, Fact.CPU_CORES, 2),
        make_requirement("Free disk (GB)", RequirementKind.MIN_NUMERIC, Fact.DISK_FREE_GB, 10),
        make_requirement("Python", RequirementKind.MIN_VERSION, Fact.RUNTIME, "3.10.0"),
        make_requirement("pip", RequirementKind.PRESENCE, Fact.PACKAGE_MANAGER, True),
        make_requirement("Git", RequirementKind.MIN_VERSION, Fact.VCS, "2.30"),
        make_requirement("MSVC compiler (cl.exe)", RequirementKind.PRESENCE, Fact.COMPILER, True),
        make_requirement(
            "Build tools", RequirementKind.TOOL_LIST, Fact.TOOLS,
            ["pyinstaller", "nuitka", "cython", "sphinx-build", "pyarmor"],
            mandatory=False,
        ),
    ])
