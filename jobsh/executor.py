import os
import subprocess
import sys

from loguru import logger

from jobsh.builtin import BuiltinKind
from jobsh.config import SHELL_NAME
from jobsh.errors import ArityError, JobshError, SpawnError


def report_error(name, err):
    """Print a diagnostic for a failed command, return its exit status."""
    if isinstance(err, ArityError):
        print(err, file=sys.stderr)
        return err.status
    if isinstance(err, SpawnError):
        print(f"{SHELL_NAME}: {err}", file=sys.stderr)
        return err.status
    if isinstance(err, JobshError):
        print(f"{SHELL_NAME}: {name}: {err}", file=sys.stderr)
        return err.status
    print(f"{SHELL_NAME}: {name}: {err.strerror or err}", file=sys.stderr)
    return (err.errno or 1) & 0xFF


def call_builtin(handler, args):
    """
    Run a builtin handler, turning its failures into a status.
    Returns: exit_code
    """
    try:
        return handler(args)
    except (JobshError, OSError) as e:
        return report_error(args[0], e)


class ForkedChild:
    """Popen-like handle for a builtin running in a forked child."""

    def __init__(self, pid):
        self.pid = pid
        self.returncode = None

    def _set_status(self, status):
        self.returncode = os.waitstatus_to_exitcode(status)
        return self.returncode

    def poll(self):
        if self.returncode is not None:
            return self.returncode
        pid, status = os.waitpid(self.pid, os.WNOHANG)
        if pid == 0:
            return None
        return self._set_status(status)

    def wait(self):
        if self.returncode is not None:
            return self.returncode
        _, status = os.waitpid(self.pid, 0)
        return self._set_status(status)


def fork_builtin(handler, args):
    """
    Run a builtin in a child process.
    The child's state (cwd included) never leaks back into the shell, so
    `cd dir &` changes nothing here.
    """
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        pid = os.fork()
    except OSError as e:
        print("Error when trying to create child process", file=sys.stderr)
        raise SpawnError(str(e), status=1) from e

    if pid == 0:
        status = 1
        try:
            status = call_builtin(handler, args)
        finally:
            sys.stdout.flush()
            sys.stderr.flush()
            os._exit(status & 0xFF)

    logger.debug("forked builtin {} as pid {}", args[0], pid)
    return ForkedChild(pid)


def run_external(args, background=False):
    """
    Start an external program with args as its argv.
    Returns: Popen object
    """
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        if background:
            # own process group: Ctrl+C at the prompt must not reach it
            proc = subprocess.Popen(args, preexec_fn=os.setpgrp)
        else:
            proc = subprocess.Popen(args)
    except FileNotFoundError as e:
        raise SpawnError(f"command not found: {args[0]}", status=127) from e
    except PermissionError as e:
        raise SpawnError(f"permission denied: {args[0]}", status=126) from e
    except OSError as e:
        print("Error when trying to create child process", file=sys.stderr)
        raise SpawnError(f"failed to execute '{args[0]}': {e}", status=1) from e

    logger.debug("spawned {} as pid {} (background={})", args, proc.pid, background)
    return proc


def launch(args, kind, foreground, handler=None):
    """
    Run one command.
    Foreground builtins run in this process; background builtins are
    forked; everything else is spawned with subprocess.
    Returns: (exit_code, None) when foreground, (pid, handle) otherwise
    """
    if kind is not BuiltinKind.EXTERNAL and foreground:
        return call_builtin(handler, args), None

    if kind is BuiltinKind.EXTERNAL:
        proc = run_external(args, background=not foreground)
    else:
        proc = fork_builtin(handler, args)

    if foreground:
        try:
            return proc.wait(), None
        except KeyboardInterrupt:
            # the child shares our process group and got the same SIGINT
            proc.wait()
            raise
    return proc.pid, proc
