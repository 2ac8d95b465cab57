"""
securecrypt command line: single transforms, brute-force search and the
algorithm classifier, for poking at the library from a shell.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from colorama import Fore, Style
from colorama import init as _init_colorama

from . import registry
from .bruteforce import BruteForceSearch
from .classifier import OnlineClassifier
from .config import Settings
from .errors import AlgorithmError, ConfigurationError, ContractViolation
from .log import setup_logging
from .prediction import Prediction, predict_algorithm, submit_feedback
from .storage import JsonFileStore

logger = logging.getLogger(__name__)

# ---------- Colors ----------
_init_colorama(autoreset=True)
BOLD = Style.BRIGHT; RESET = Style.RESET_ALL
CYAN, GREEN, YELLOW, BLUE = Fore.CYAN, Fore.GREEN, Fore.YELLOW, Fore.BLUE

def cCYN(s): return f"{BOLD}{CYAN}{s}{RESET}"
def cGRN(s): return f"{BOLD}{GREEN}{s}{RESET}"
def cYEL(s): return f"{BOLD}{YELLOW}{s}{RESET}"
def cBLU(s): return f"{BLUE}{s}{RESET}"

def eprint(*a, **k): print(*a, file=sys.stderr, **k)


# ---------- Helpers ----------
def read_value_or_file(v: Optional[str]) -> Optional[str]:
    """A literal string, or the contents of the file it names."""
    if v is None: return None
    if os.path.isfile(v):
        with open(v, "r", encoding="utf-8") as f:
            return f.read().rstrip("\n")
    return v


def _classifier(settings: Settings) -> OnlineClassifier:
    return OnlineClassifier(JsonFileStore(settings.model_path, settings.feedback_limit), settings)


def _progress_printer(enabled: bool):
    if not enabled:
        return None
    last = [-1]
    def show(pct: float):
        step = int(pct) // 10
        if step != last[0]:
            last[0] = step
            eprint(cBLU(f"  {pct:5.1f}%"))
    return show


# ---------- Commands ----------
def cmd_encode(args, settings: Settings) -> int:
    print(registry.encode(args.cipher, read_value_or_file(args.text), args.key))
    return 0


def cmd_decode(args, settings: Settings) -> int:
    print(registry.decode(args.cipher, read_value_or_file(args.text), args.key))
    return 0


def cmd_bruteforce(args, settings: Settings) -> int:
    search = BruteForceSearch(read_value_or_file(args.text), args.category, args.key, settings)
    print(cCYN(f"=== {search.category.value}: {search.total} attempts ==="))
    results = search.search(_progress_printer(args.progress))
    shown = [r for r in results if r.is_readable or args.all][:args.top]
    if not shown:
        print(cYEL("No readable candidates."))
        return 1
    for r in shown:
        colour = cGRN if r.is_readable else cYEL
        print(f"{colour(f'{r.confidence:.2f}')} {r.algorithm}: {r.result_text}")
    return 0


def _print_predictions(preds: List[Prediction], top: int) -> None:
    for i, p in enumerate(preds[:top], 1):
        print(f"{i:2d}. {cGRN(p.algorithm)} {p.confidence:.2f}  {cBLU(p.reasoning)}")


def cmd_predict(args, settings: Settings) -> int:
    preds = predict_algorithm(read_value_or_file(args.text), _classifier(settings))
    if not preds:
        print(cYEL("No prediction."))
        return 1
    _print_predictions(preds, args.top)
    return 0


def cmd_feedback(args, settings: Settings) -> int:
    text = read_value_or_file(args.text)
    clf = _classifier(settings)
    preds = predict_algorithm(text, clf)
    if not preds:
        print(cYEL("No prediction to give feedback on."))
        return 1
    if not 1 <= args.rank <= len(preds):
        print(cYEL(f"--rank must be between 1 and {len(preds)}"))
        return 2
    chosen = preds[args.rank - 1]
    example = submit_feedback(text, chosen, args.verdict == "correct", clf, args.actual)
    print(cGRN(f"Recorded: {example.predicted_algorithm} -> {example.actual_algorithm} ({args.verdict})"))
    return 0


def cmd_stats(args, settings: Settings) -> int:
    st = _classifier(settings).stats()
    print(cCYN("=== Model ==="))
    print(f"training examples: {st.training_count}")
    print(f"accuracy:          {st.accuracy:.2%}")
    print(f"feedback retained: {st.feedback_size}")
    print(f"last updated:      {st.last_updated}")
    print(f"algorithms:        {', '.join(st.algorithms) or '-'}")
    return 0


def cmd_reset(args, settings: Settings) -> int:
    _classifier(settings).reset()
    print(cGRN("Model and feedback log cleared."))
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="securecrypt", description="Classical cipher toolkit with brute force and algorithm prediction")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="More log output (-vv for debug)")
    ap.add_argument("--model", help="Model file (default: $SECURECRYPT_MODEL_PATH or ~/.securecrypt/model.json)")
    sub = ap.add_subparsers(dest="command", required=True)

    for name, fn in (("encode", cmd_encode), ("decode", cmd_decode)):
        p = sub.add_parser(name, help=f"{name} text with one algorithm")
        p.add_argument("cipher", help="Cipher id, e.g. caesar, vigenere, base64, aes")
        p.add_argument("text", help="Text (raw string or path to file)")
        p.add_argument("-k", "--key", help="Key; omitted keys fall back to the cipher's default")
        p.set_defaults(func=fn)

    p = sub.add_parser("bruteforce", help="try every algorithm/key in a category")
    p.add_argument("text", help="Ciphertext (raw string or path to file)")
    p.add_argument("-c", "--category", default="all", choices=[c.value for c in registry.Category])
    p.add_argument("-k", "--key", help="Extra key tried before the dictionary")
    p.add_argument("-n", "--top", type=int, default=10)
    p.add_argument("-a", "--all", action="store_true", help="Also show unreadable candidates")
    p.add_argument("-p", "--progress", action="store_true", help="Print progress to stderr")
    p.set_defaults(func=cmd_bruteforce)

    p = sub.add_parser("predict", help="rank likely source algorithms")
    p.add_argument("text")
    p.add_argument("-n", "--top", type=int, default=5)
    p.set_defaults(func=cmd_predict)

    p = sub.add_parser("feedback", help="train the model on a prediction")
    p.add_argument("text")
    p.add_argument("verdict", choices=["correct", "incorrect"])
    p.add_argument("-r", "--rank", type=int, default=1, help="Which prediction (1 = top)")
    p.add_argument("--actual", help="The real algorithm, for incorrect predictions")
    p.set_defaults(func=cmd_feedback)

    sub.add_parser("stats", help="show model statistics").set_defaults(func=cmd_stats)
    sub.add_parser("reset", help="clear the model and feedback log").set_defaults(func=cmd_reset)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        eprint(cYEL(f"Configuration error: {e}"))
        return 2
    if args.model:
        settings.model_path = Path(args.model).expanduser()
    level = ("WARNING", "INFO", "DEBUG")[min(args.verbose, 2)] if args.verbose else settings.log_level
    setup_logging(level, settings.log_file)
    logger.debug("running %s", args.command)
    try:
        return args.func(args, settings)
    except (AlgorithmError, ContractViolation) as e:
        eprint(cYEL(f"Error: {e}"))
        return 2

