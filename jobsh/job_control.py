import sys
from dataclasses import dataclass

import psutil
from loguru import logger


@dataclass
class Job:
    """
    A background process waiting to be reaped.
    handle: object with a non-blocking poll() -> exit status or None
    (subprocess.Popen, ForkedChild)
    """

    pid: int
    command: list
    handle: object

    @property
    def cmdline(self):
        return " ".join(self.command)


class JobTracker:
    """
    Table of background jobs, keyed by pid.
    Finished jobs are only discovered by reap(), which the dispatcher calls
    once per line, so a completion is reported one prompt cycle late.
    """

    def __init__(self, out=None):
        self._jobs = {}
        self._out = out

    def __len__(self):
        return len(self._jobs)

    def __contains__(self, pid):
        return pid in self._jobs

    @property
    def out(self):
        return self._out or sys.stdout

    def add(self, job):
        """Thêm job vào danh sách background"""
        if job.pid in self._jobs:
            raise ValueError(f"pid {job.pid} is already tracked")
        self._jobs[job.pid] = job
        print(f"[{job.pid}] started in background: {job.cmdline}", file=self.out)

    def pending(self):
        return list(self._jobs.values())

    def reap(self):
        """
        Poll every pending job once without blocking.
        Finished jobs are removed and reported.
        Returns: list of (pid, status)
        """
        finished = []
        for pid, job in list(self._jobs.items()):
            try:
                status = job.handle.poll()
            except ChildProcessError:
                # someone else already waited for it, its status is lost
                logger.warning("job {} vanished before it could be reaped", pid)
                status = 1
            if status is None:
                continue
            del self._jobs[pid]
            finished.append((pid, status))
            logger.debug("reaped job {} ({}) status={}", pid, job.cmdline, status)
            print(f"Value returned by the process with pid {pid}: {status}", file=self.out)
        return finished

    def show(self):
        """Hiển thị danh sách tiến trình nền"""
        if not self._jobs:
            print("No background jobs.", file=self.out)
            return

        print(f"{'PID':<8} {'Command'}", file=self.out)
        print("-" * 40, file=self.out)
        for pid, job in self._jobs.items():
            try:
                if psutil.pid_exists(pid):
                    status = psutil.Process(pid).status()
                else:
                    status = "terminated"
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                status = "unknown"
            print(f"{pid:<8} {job.cmdline}  [{status}]", file=self.out)

