import os
import time

import pytest

from mediaconf.watcher import ConfWatcher


@pytest.fixture
def conf_file(tmp_path):
    fpath = tmp_path / "conf.yml"
    fpath.write_text("{}")
    return str(fpath)


def rewrite(fpath):
    with open(fpath, "w") as fh:
        fh.write("{}")


def test_no_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfWatcher(str(tmp_path / "nonexistent"))


def test_write(conf_file):
    with ConfWatcher(conf_file) as w:
        rewrite(conf_file)
        assert w.wait(0.5) is True


def test_write_multiple_times(conf_file):
    with ConfWatcher(conf_file) as w:
        rewrite(conf_file)
        time.sleep(0.01)
        rewrite(conf_file)

        assert w.wait(0.5) is True
        assert w.wait(0.5) is False


def test_delete_create(conf_file):
    with ConfWatcher(conf_file) as w:
        os.remove(conf_file)
        time.sleep(0.01)
        rewrite(conf_file)
        assert w.wait(0.5) is True


def test_symlink_delete_create(conf_file):
    link = conf_file + "-sym"
    os.symlink(conf_file, link)

    with ConfWatcher(link) as w:
        os.remove(conf_file)
        rewrite(conf_file)
        assert w.wait(0.5) is True


def test_unrelated_file_ignored(conf_file, tmp_path):
    with ConfWatcher(conf_file) as w:
        (tmp_path / "other.txt").write_text("data")
        assert w.wait(0.3) is False


def test_wait_after_close_returns_false(conf_file):
    w = ConfWatcher(conf_file)
    w.close()
    started = time.monotonic()
    assert w.wait(2.0) is False
    assert time.monotonic() - started < 1.0