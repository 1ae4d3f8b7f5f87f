import logging
import subprocess

logger = logging.getLogger(__name__)

# Return codes used when the process could not be run at all
RC_TIMEOUT = 124
RC_NOT_RUNNABLE = 126
RC_NOT_FOUND = 127


def run_cmd(cmd: list[str], timeout_s: float = 10) -> tuple[int, str, str]:
    """
    Run a command and return:
      - return code (rc)
      - stdout (string)
      - stderr (string)

    Never raises for launch problems. A missing executable, a permission error
    or a timeout come back as rc 127 / 126 / 124 with the reason in stderr, so
    probes can treat "could not run" the same way as "not installed".
    """
    try:
        p = subprocess.run(
            cmd,
            text=True,                  # decode output to str instead of bytes
            errors="replace",           # tool banners are not always valid in the locale codec
            capture_output=True,        # capture stdout/stderr
            stdin=subprocess.DEVNULL,   # tools that prompt must not block the run
            timeout=timeout_s
        )
    except FileNotFoundError as e:
        return RC_NOT_FOUND, "", f"{type(e).__name__}: {e}"
    except subprocess.TimeoutExpired:
        logger.warning("Command timed out after %ss: %s", timeout_s, " ".join(cmd))
        return RC_TIMEOUT, "", f"timed out after {timeout_s}s"
    except OSError as e:
        return RC_NOT_RUNNABLE, "", f"{type(e).__name__}: {e}"

    # Normalise None -> "" and strip whitespace
    return p.returncode, (p.stdout or "").strip(), (p.stderr or "").strip()


def get_evidence(cmd, rc, stdout, stderr):

    return {
        "cmd": " ".join(cmd) if isinstance(cmd, (list, tuple)) else cmd,
        "rc": rc,
        "stdout": stdout,
        "stderr": stderr
    }
