import os
import tempfile


def atomic_write(path, text, mode=0o644):
    """
    Replace path with text in one step.

    The text goes to a temp file in the same directory, which is fsynced
    and then renamed over path, so readers see the old file or the new
    one and never a partial write. Raises OSError.
    """
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.', suffix='.tmp')
    try:
        os.fchmod(fd, mode)
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
