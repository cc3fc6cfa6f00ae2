from __future__ import annotations

import os

from . import create_app

app = create_app()


if __name__ == "__main__":
    # The reloader would start a second midnight scheduler in the child process.
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "3000")), use_reloader=False)
