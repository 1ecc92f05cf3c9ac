import os
import socket
import sys
from functools import partial
from typing import NamedTuple

from loguru import logger

from jobsh import config
from jobsh.builtin import HANDLERS, BuiltinKind, builtin_jobs, parse_exit_status, resolve
from jobsh.errors import JobshError
from jobsh.executor import launch, report_error
from jobsh.job_control import Job, JobTracker
from jobsh.parser import ControlOperator, parse_line


class DispatchResult(NamedTuple):
    status: int
    quit_requested: bool = False


class Dispatcher:
    """
    Runs the segments of one line after another.
    Owns no jobs itself: the tracker and the launcher are passed in.
    """

    def __init__(self, jobs=None, launcher=launch):
        self.jobs = jobs if jobs is not None else JobTracker()
        self.launcher = launcher
        self.handlers = dict(HANDLERS)
        self.handlers[BuiltinKind.JOBS] = partial(builtin_jobs, tracker=self.jobs)
        self.last_status = 0

    def run_line(self, line):
        return self.execute(parse_line(line))

    def execute(self, segments):
        """
        Reap finished background jobs, then run every segment in order.
        Stops at the first `exit`.
        Returns: DispatchResult
        """
        self.jobs.reap()

        for seg in segments:
            args = seg.command
            if not args:
                continue

            kind = resolve(args[0])
            if kind is BuiltinKind.EXIT:
                status = parse_exit_status(args, self.last_status)
                self.last_status = status
                return DispatchResult(status, True)

            if seg.operator is ControlOperator.PIPE:
                logger.debug("'|' after {} carries no data, running sequentially", args[0])

            foreground = not seg.background
            logger.debug("dispatch {} kind={} foreground={}", args, kind.name, foreground)
            try:
                value, handle = self.launcher(args, kind, foreground, self.handlers.get(kind))
            except (JobshError, OSError) as e:
                self.last_status = report_error(args[0], e)
                continue

            if foreground:
                self.last_status = value
            else:
                self.jobs.add(Job(value, list(args), handle))

        return DispatchResult(self.last_status)


def prompt(last_status=0):
    """Generate shell prompt: user@host:cwd $> ($< after a failure)"""
    user = os.getenv("USER") or os.getenv("USERNAME") or "user"
    host = socket.gethostname()
    symbol = config.PROMPT_OK if last_status == 0 else config.PROMPT_FAIL
    return f"{user}@{host}:{os.getcwd()} {symbol}"


def setup_logging():
    logger.remove()
    logger.add(sys.stderr, level=config.LOG_LEVEL,
               format="<level>{level: <8}</level> {name}:{line} - {message}")
    logger.enable("jobsh")


def main_loop(dispatcher=None):
    """
    Main shell loop
    Returns: exit status of the session
    """
    dispatcher = dispatcher or Dispatcher()
    interactive = sys.stdin.isatty()

    while True:
        try:
            line = input(prompt(dispatcher.last_status) if interactive else "")
        except EOFError:
            if interactive:
                print()
            return 0
        except KeyboardInterrupt:
            print()
            continue

        try:
            result = dispatcher.run_line(line)
        except KeyboardInterrupt:
            print()
            dispatcher.last_status = 130
            continue

        if result.quit_requested:
            return result.status


def main():
    setup_logging()
    sys.exit(main_loop())


if __name__ == "__main__":
    main()
