"""
    Native compiler (MSVC cl.exe) discovery.

    The compiler can live in several install topologies, so resolution is an
    ordered list of tiers. Each tier is a function (config, host) -> path | None
    and the first one to return a path wins:

      1. override        explicit path from configuration
      2. ambient         binary resolvable on PATH
      3. installer       vswhere -> installation root -> VC/Tools/MSVC/<latest>
      4. developer-env   VCToolsInstallDir from an activated developer shell
      5. fixed-roots     conventional Program Files / Program Files (x86) roots

    Not finding the compiler is a normal outcome.
"""
import logging
import os
from typing import Callable, NamedTuple, Optional

from core.config import ToolchainConfig
from core.models import ProbeResult
from core.version import extract_version
from helpers.host import probe

logger = logging.getLogger(__name__)


class Resolution(NamedTuple):
    path: Optional[str]
    tier: Optional[str]


def latest_version_dir(root: str, host) -> Optional[str]:
    """Lexicographically greatest subdirectory of `root`, or None."""
    names = host.list_dirs(root)
    if not names:
        return None
    return os.path.join(root, max(names))


def probe_host_target(toolset_dir: str, config: ToolchainConfig, host) -> Optional[str]:
    """First existing <toolset_dir>/bin/Host*/*/<binary> in host/target preference order."""
    for subpath in config.host_target_subpaths:
        candidate = os.path.join(toolset_dir, *subpath, config.binary_name)
        if host.is_file(candidate):
            return candidate
    return None


def resolve_override(config: ToolchainConfig, host) -> Optional[str]:
    path = config.override_path
    if not path:
        return None
    if host.is_file(path):
        return path
    logger.warning("Configured compiler path does not exist: %s", path)
    return None


def resolve_ambient(config: ToolchainConfig, host) -> Optional[str]:
    return host.which(config.binary_name)


def resolve_installer_query(config: ToolchainConfig, host) -> Optional[str]:
    if not host.is_file(config.installer_query_path):
        return None

    cmd = [
        config.installer_query_path,
        "-latest",
        "-products", "*",
        "-requires", config.installer_component,
        "-property", "installationPath",
    ]
    rc, stdout, stderr = host.run(cmd)
    if rc != 0 or not stdout.strip():
        logger.debug("Installer query returned no installation (rc=%s): %s", rc, stderr)
        return None

    install_root = stdout.strip().splitlines()[0].strip()
    toolset = latest_version_dir(os.path.join(install_root, *config.toolset_dir), host)
    if toolset is None:
        return None
    return probe_host_target(toolset, config, host)


def resolve_developer_env(config: ToolchainConfig, host) -> Optional[str]:
    # VCToolsInstallDir already points at VC/Tools/MSVC/<version>/
    toolset = host.getenv(config.env_var)
    if not toolset:
        return None
    return probe_host_target(toolset.rstrip("\\/"), config, host)


def resolve_fixed_roots(config: ToolchainConfig, host) -> Optional[str]:
    for root in config.fixed_roots:
        if not host.is_dir(root):
            continue
        toolset = latest_version_dir(root, host)
        if toolset is None:
            continue
        found = probe_host_target(toolset, config, host)
        if found:
            return found
    return None


Strategy = Callable[[ToolchainConfig, object], Optional[str]]

TIERS: tuple = (
    ("override", resolve_override),
    ("ambient", resolve_ambient),
    ("installer", resolve_installer_query),
    ("developer-env", resolve_developer_env),
    ("fixed-roots", resolve_fixed_roots),
)


def resolve_toolchain(config: ToolchainConfig, host, tiers=TIERS) -> Resolution:
    for tier, strategy in tiers:
        try:
            path = strategy(config, host)
        except Exception as e:
            # a broken tier (unreadable root, odd installer output) never stops the search
            logger.warning("Compiler tier %s failed: %s: %s", tier, type(e).__name__, e)
            continue
        if path:
            logger.info("Compiler resolved via %s: %s", tier, path)
            return Resolution(path, tier)

    logger.debug("Compiler not found in any tier")
    return Resolution(None, None)


@probe
def probe_compiler(config: ToolchainConfig, host) -> ProbeResult:
    """
    Resolve the compiler, then read its version from the banner it prints when
    run without arguments ("... Compiler Version 19.40.33811 for x64").
    """
    resolution = resolve_toolchain(config, host)
    if resolution.path is None:
        return ProbeResult.absent()

    _rc, stdout, stderr = host.run([resolution.path])
    version = extract_version(f"{stdout}\n{stderr}", config.version_pattern) or ""
    return ProbeResult.present(value=version, path=resolution.path, source=resolution.tier)
