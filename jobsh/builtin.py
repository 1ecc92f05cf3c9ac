import os
import sys
from enum import Enum

from jobsh.errors import ArityError
from jobsh.fileops import copy_file, move_file


class BuiltinKind(Enum):
    ECHO = "echo"
    CD = "cd"
    CP = "cp"
    MV = "mv"
    EXIT = "exit"
    JOBS = "jobs"
    HELP = "help"
    EXTERNAL = None


_BY_NAME = {kind.value: kind for kind in BuiltinKind if kind.value}


def resolve(name):
    """Map a command name to its builtin kind, EXTERNAL if it has none."""
    return _BY_NAME.get(name, BuiltinKind.EXTERNAL)


def builtin_help(args):
    """Print help message"""
    print("""jobsh help:
 Built-in commands:
  echo [word ...]     : print words separated by spaces
  cd <dir>            : change directory
  cp [-a] <src> <dst> : copy a file (-a keeps owner, mode and times)
  mv <src> <dst>      : move a file (copy, then delete the source)
  jobs                : list background jobs
  exit [status]       : exit shell
  help                : print this help

Operators:
  cmd ; cmd   run one after the other
  cmd &       run in background
  cmd | cmd   accepted, but no data is passed between commands
  # text      comment until end of line
""")
    return 0


def builtin_echo(args):
    sys.stdout.write(" ".join(args[1:]) + "\n")
    return 0


def builtin_cd(args):
    """Change directory. Exactly one operand, no default to $HOME."""
    if len(args) != 2:
        raise ArityError("ERROR: Too many arguments")
    os.chdir(args[1])
    return 0


def builtin_cp(args):
    if len(args) == 3:
        result = copy_file(args[1], args[2])
    elif len(args) == 4 and args[1] == "-a":
        result = copy_file(args[2], args[3], preserve=True)
    else:
        raise ArityError("Syntax is incorrect")
    result.raise_for_error()
    return 0


def builtin_mv(args):
    if len(args) != 3:
        raise ArityError("Syntax is incorrect")
    move_file(args[1], args[2]).raise_for_error()
    return 0


def builtin_jobs(args, tracker=None):
    """Process monitor - show background jobs"""
    if tracker is None:
        print("No background jobs.")
        return 0
    tracker.show()
    return 0


# EXIT and EXTERNAL are handled by the dispatcher itself
HANDLERS = {
    BuiltinKind.ECHO: builtin_echo,
    BuiltinKind.CD: builtin_cd,
    BuiltinKind.CP: builtin_cp,
    BuiltinKind.MV: builtin_mv,
    BuiltinKind.JOBS: builtin_jobs,
    BuiltinKind.HELP: builtin_help,
}


def parse_exit_status(args, last_status):
    """
    Status to leave the shell with for `exit [status]`.
    `exit` always ends the shell, bad operands only change the status.
    """
    if len(args) == 1:
        return last_status
    if len(args) > 2:
        print("ERROR: Too many arguments", file=sys.stderr)
        return 1
    try:
        return int(args[1]) & 0xFF
    except ValueError:
        print(f"exit: {args[1]}: numeric argument required", file=sys.stderr)
        return 2
