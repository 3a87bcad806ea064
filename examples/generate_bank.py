from __future__ import annotations

import sys
from pathlib import Path

import gostubber
from gostubber.format import get_formatter


def main() -> None:
    # Requirements:
    # - Go toolchain installed (go >= 1.22)
    # - gofmt on PATH, or GOSTUBBER_FORMATTER=none
    bank_dir = Path(__file__).resolve().parent / "bank"

    # Stubs next to the interfaces: bank/bank_stubs.go declares StubbedAccount
    # and StubbedLedger in package bank.
    options = gostubber.GenerateOptions(inputs=(bank_dir,))
    for f in gostubber.run(options, formatter=get_formatter()):
        print("wrote", f.path)

    # Stubs in their own package, printed instead of written. The stub would be
    # named Account here; the rename turns it into FakeAccount.
    options = gostubber.GenerateOptions(
        inputs=(bank_dir,),
        output_dir=bank_dir / "fakes",
        types=frozenset({"Account"}),
        renames={"bank.Account": "FakeAccount"},
        build_tag=None,
    )
    gostubber.run(options, formatter=get_formatter(), out=sys.stdout.buffer)


if __name__ == "__main__":
    main()
