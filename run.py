"""Project root entry point for launching the OSFIT API."""

from __future__ import annotations

import os

from osfit.web import create_app


def main():
    app = create_app()
    port = int(os.environ.get("OSFIT_PORT", "5500"))
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("OSFIT_DEBUG") == "1")


if __name__ == "__main__":
    main()
