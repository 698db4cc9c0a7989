"""Stand-in for ``tsc -p CONFIG --watch --noEmit``.

Reports one error for every checked file that contains ``STRICT_ERROR`` and
re-reports whenever the config file content changes.

Extra flags before ``-p`` simulate a misbehaving compiler:
``--exit-after-baseline`` quits after the first report and
``--hang-after-baseline`` stops reporting after it.
"""

import glob
import json
import os
import sys
import time


def checked_files(config_path, config):
    root = os.path.dirname(os.path.abspath(config_path))
    files = set()
    for pattern in config.get("include") or []:
        matches = glob.glob(os.path.join(root, pattern), recursive=True)
        files.update(os.path.normpath(p) for p in matches)
    for pattern in config.get("exclude") or []:
        matches = glob.glob(os.path.join(root, pattern), recursive=True)
        files.difference_update(os.path.normpath(p) for p in matches)
    for entry in config.get("files") or []:
        files.add(os.path.normpath(os.path.join(root, entry)))
    return files


def count_errors(config_path, config):
    errors = 0
    for path in checked_files(config_path, config):
        with open(path, encoding="utf-8") as f:
            if "STRICT_ERROR" in f.read():
                errors += 1
    return errors


def main():
    config_path = sys.argv[sys.argv.index("-p") + 1]
    exit_after = "--exit-after-baseline" in sys.argv
    hang_after = "--hang-after-baseline" in sys.argv
    last = None
    reports = 0
    while True:
        with open(config_path, encoding="utf-8") as f:
            content = f.read()
        if content != last:
            # The config is replaced atomically; a partial file is a bug
            config = json.loads(content)
            last = content
            if reports and hang_after:
                time.sleep(0.02)
                continue
            n = count_errors(config_path, config)
            print("File change detected. Starting incremental compilation...", flush=True)
            print(f"Found {n} error{'' if n == 1 else 's'}. Watching for file changes.", flush=True)
            reports += 1
            if exit_after:
                return
        time.sleep(0.02)


if __name__ == "__main__":
    main()
