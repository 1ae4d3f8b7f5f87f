"""
    External tool discovery: language runtime, its package manager, the
    version-control client and any named build tools.

    Every tool is found with the same "first candidate wins" pattern: try each
    candidate invocation in priority order and keep the first one that runs and
    reports a parseable version.
"""
import logging
from dataclasses import dataclass

from core.models import ProbeResult
from core.version import extract_version
from helpers.host import probe

logger = logging.getLogger(__name__)

GENERIC_VERSION_PATTERN = r"(\d+(?:\.\d+)+)"


@dataclass(frozen=True)
class ToolSpec:
    name: str
    # each candidate is a base invocation; version_args are appended to it
    candidates: tuple
    version_args: tuple = ("--version",)
    version_pattern: str = GENERIC_VERSION_PATTERN


RUNTIME_VERSION_PATTERN = r"Python\s+(\d+(?:\.\d+)+)"

KNOWN_TOOLS = {
    "git": ToolSpec("git", (("git",),), version_pattern=r"git version\s+(\d+(?:\.\d+)+)"),
    "pyinstaller": ToolSpec("pyinstaller", (("pyinstaller",), ("python", "-m", "PyInstaller"))),
    "nuitka": ToolSpec("nuitka", (("nuitka",), ("python", "-m", "nuitka"))),
    "cython": ToolSpec("cython", (("cython",), ("python", "-m", "cython")),
                       version_pattern=r"[Cc]ython version\s+(\d+(?:\.\d+)+)"),
    "sphinx-build": ToolSpec("sphinx-build", (("sphinx-build",), ("python", "-m", "sphinx"))),
    "pyarmor": ToolSpec("pyarmor", (("pyarmor",),)),
}


def probe_tool(spec: ToolSpec, host) -> ProbeResult:
    """
    Discover one tool.

    Outcomes:
      - found, value=<version>  : a candidate ran and its version parsed
      - found, value=""         : something answered but no version could be read
                                  (fails a version threshold, passes presence)
      - not found               : no candidate resolved or ran successfully
    """
    responder = None

    for candidate in spec.candidates:
        executable = host.which(candidate[0])
        if executable is None:
            logger.debug("%s: %s not on PATH", spec.name, candidate[0])
            continue

        cmd = [executable, *candidate[1:], *spec.version_args]
        rc, stdout, stderr = host.run(cmd)
        if rc != 0:
            logger.debug("%s: %s exited with %s", spec.name, " ".join(cmd), rc)
            continue

        # Some tools (python 2, cl.exe, cython) print their banner on stderr
        version = extract_version(f"{stdout}\n{stderr}", spec.version_pattern)
        source = " ".join(candidate)
        if version:
            return ProbeResult.present(value=version, path=executable, source=source)
        if responder is None:
            responder = ProbeResult.present(value="", path=executable, source=source)

    if responder is not None:
        logger.warning("%s responded but its version could not be parsed", spec.name)
        return responder
    return ProbeResult.absent()


@probe
def probe_runtime(candidates, host) -> ProbeResult:
    """
    Find the language runtime. The winning candidate is asked for sys.executable
    so the recorded path is the interpreter itself, not a launcher shim.
    """
    spec = ToolSpec("python", tuple(tuple(c) for c in candidates),
                    version_pattern=RUNTIME_VERSION_PATTERN)
    result = probe_tool(spec, host)
    if not result.found:
        return result

    base = next(c for c in spec.candidates if " ".join(c) == result.source)
    cmd = [result.path, *base[1:], "-c", "import sys; print(sys.executable)"]
    rc, stdout, _stderr = host.run(cmd)
    if rc == 0 and stdout.strip():
        return ProbeResult.present(value=result.value, path=stdout.strip().splitlines()[-1],
                                   source=result.source)
    return result


@probe
def probe_package_manager(runtime: ProbeResult, host) -> ProbeResult:
    """pip for the discovered runtime. Not attempted when the runtime is missing."""
    if not runtime.found or not runtime.path:
        return ProbeResult.absent(error="runtime not found")

    spec = ToolSpec(
        "pip",
        ((runtime.path, "-m", "pip"), ("pip3",), ("pip",)),
        version_pattern=r"pip\s+(\d+(?:\.\d+)+)",
    )
    return probe_tool(spec, host)


@probe
def probe_vcs(host) -> ProbeResult:
    return probe_tool(KNOWN_TOOLS["git"], host)


@probe
def probe_named_tool(name: str, host) -> ProbeResult:
    """A known tool spec if there is one, otherwise `<name> --version`."""
    spec = KNOWN_TOOLS.get(name.lower()) or ToolSpec(name, ((name,),))
    return probe_tool(spec, host)
