"""Launch script for the armor_sim HTTP API."""

import argparse

import uvicorn

from armor_sim.config import resolve_settings


def main(argv=None):
    """Start the API server."""
    p = argparse.ArgumentParser(prog="python -m armor_sim.api.run")
    p.add_argument("--config", type=str, action="append", default=[])
    p.add_argument("--reload", action="store_true")
    args = p.parse_args(argv)

    settings = resolve_settings(args.config)
    api = settings["api"]
    print(f"Serving armor_sim on http://{api['host']}:{api['port']} (Ctrl+C to stop)")

    uvicorn.run(
        "armor_sim.api.app:app",
        host=api["host"],
        port=int(api["port"]),
        reload=args.reload,
        log_level=str(settings["log"]["level"]).lower(),
    )


if __name__ == "__main__":
    main()
