"""
main.py — Bootstrap

1. Load engine tunables
2. Load content catalogs → Catalog
3. Create the host and load (or start) the save
4. Catch up offline time
5. Run headless

    python main.py                 # run until Ctrl+C
    python main.py --seconds 30    # run 30 s, then save and exit
"""

import argparse
from pathlib import Path

from core import tuning
from core.app import GameApp
from core.data import load_catalog
from core.save import get_save_file

ROOT = Path(__file__).resolve().parent


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run the idle simulation headless.")
    parser.add_argument("--seconds", type=float, default=None,
                        help="stop after this many real seconds")
    parser.add_argument("--slot", type=int, default=0, help="save slot")
    parser.add_argument("--reset", action="store_true", help="start a fresh game")
    args = parser.parse_args(argv)

    # -- Load game data --
    tuning.load(ROOT / "data" / "tuning.toml")
    catalog = load_catalog(ROOT / "data")

    # -- Host --
    app = GameApp(catalog, save_path=get_save_file(args.slot))
    app.bus.subscribe("SaveDiscarded", lambda e: print(f"[SAVE] Started fresh (discarded {e.path})"))
    app.load()
    if args.reset:
        app.hard_reset()

    state = app.state
    print(f"[APP] Ready: activity={state.activity.type}, "
          f"gold={state.resources.get('gold', 0):.0f}, log={len(state.log)} entries")
    for entry in state.log.recent(5):
        print(f"  {entry['msg']}")

    app.run(seconds=args.seconds)
    print(f"[APP] Saved to {app.save_path}")


if __name__ == "__main__":
    main()
