"""Minimal GTP engine used by the controller integration tests."""

import sys

GRID_SIZE = 3
BRANCH_LINES = 2000


def main() -> None:
    size = GRID_SIZE
    for raw_line in sys.stdin:
        tokens = raw_line.split()
        if not tokens:
            continue
        command_id = tokens.pop(0) if tokens[0].isdigit() else ""
        name, args = tokens[0], tokens[1:]

        if name == "boardsize":
            size = int(args[0])
            reply = f"={command_id}"
        elif name == "heatmap":
            for row in range(size):
                print(" ".join(str(row * size + col) for col in range(size)), file=sys.stderr)
            print("pass: 0", file=sys.stderr)
            sys.stderr.flush()
            reply = f"={command_id}"
        elif name == "genmove":
            print("NN eval=0.5", file=sys.stderr)
            for visits in range(BRANCH_LINES):
                print(f" D4 -> {visits} (V: 1%) (N: 1%) PV: D4 Q16 C3 D5", file=sys.stderr)
            sys.stderr.flush()
            reply = f"={command_id} D4"
        elif name == "name":
            reply = f"={command_id} Fake Engine"
        elif name == "list_commands":
            reply = f"={command_id} boardsize\nheatmap\nname\nquit"
        elif name == "quit":
            print(f"={command_id}\n", flush=True)
            return
        else:
            reply = f"?{command_id} unknown command"

        print(f"{reply}\n", flush=True)


if __name__ == "__main__":
    main()
