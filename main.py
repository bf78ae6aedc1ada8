import logging
import os
import sys


def run_default_app(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    level = os.environ.get("LASSO_LOG_LEVEL", "INFO").strip().upper() or "INFO"
    logging.basicConfig(level=level, format="[Lasso] %(levelname)s %(name)s: %(message)s")

    from qt_app.main import run_qt_app

    return run_qt_app(argv[0] if argv else None)


if __name__ == "__main__":
    raise SystemExit(run_default_app())
