"""
File copy / move used by the cp and mv builtins.

Both return an FsResult instead of raising, so the builtin decides how to
report the failure. move_file is copy-then-delete: it always writes a full
copy of the source before removing it, on the same filesystem or not, and
gives no atomicity guarantee.
"""

import errno
import os
import stat
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from jobsh.config import COPY_BUFFER_SIZE
from jobsh.errors import JobshError, NotFoundError, WrongTypeError


class FsError(Enum):
    NOT_FOUND = "not found"
    WRONG_TYPE = "wrong type"
    OS_ERROR = "os error"


@dataclass(frozen=True)
class FsResult:
    error: FsError = None
    errno: int = 0
    message: str = ""

    @property
    def ok(self):
        return self.error is None

    def raise_for_error(self):
        if self.ok:
            return
        if self.error is FsError.NOT_FOUND:
            raise NotFoundError(self.message, status=self.errno)
        if self.error is FsError.WRONG_TYPE:
            raise WrongTypeError(self.message, status=self.errno)
        raise JobshError(self.message, status=self.errno or 1)


SUCCESS = FsResult()


def resolve_destination(src, dst):
    """An existing directory as destination means dst/basename(src)."""
    if os.path.isdir(dst):
        return os.path.join(dst, os.path.basename(src))
    return dst


def _copy_metadata(st, dst):
    try:
        os.chown(dst, st.st_uid, st.st_gid, follow_symlinks=False)
    except PermissionError:
        # only root may give files away
        logger.debug("chown {} skipped: not permitted", dst)
    os.chmod(dst, stat.S_IMODE(st.st_mode))
    os.utime(dst, ns=(st.st_atime_ns, st.st_mtime_ns))


def _discard(path):
    """Remove a half-written copy."""
    try:
        os.remove(path)
    except OSError as e:
        logger.warning("could not remove partial copy {}: {}", path, e)


def copy_file(src, dst, preserve=False):
    """
    Byte-for-byte copy of a regular file.
    preserve=True also copies owner, permission bits and timestamps.
    """
    if not os.path.lexists(src):
        return FsResult(FsError.NOT_FOUND, 1, f"{src}: No such file or directory")
    if not os.path.isfile(src):
        return FsResult(FsError.WRONG_TYPE, 2, f"{src}: Not a regular file")

    target = resolve_destination(src, dst)
    if os.path.exists(target) and os.path.samefile(src, target):
        return FsResult(FsError.OS_ERROR, errno.EINVAL,
                        f"{src} and {target} are the same file")

    written = False
    try:
        # stat before the read, which may move atime
        st = os.stat(src)
        with open(src, "rb") as fin, open(target, "wb") as fout:
            written = True
            while True:
                chunk = fin.read(COPY_BUFFER_SIZE)
                if not chunk:
                    break
                fout.write(chunk)
        if preserve:
            _copy_metadata(st, target)
    except OSError as e:
        if written:
            _discard(target)
        return FsResult(FsError.OS_ERROR, e.errno or 1, f"{target}: {e.strerror or e}")

    logger.debug("copied {} -> {} (preserve={})", src, target, preserve)
    return SUCCESS


def move_file(src, dst):
    result = copy_file(src, dst, preserve=True)
    if not result.ok:
        return result
    try:
        os.remove(src)
    except OSError as e:
        return FsResult(FsError.OS_ERROR, e.errno or 1, f"{src}: {e.strerror or e}")
    return SUCCESS
