import argparse
import logging
from pathlib import Path

from pyq.database import SessionLocal, init_db
from pyq.engine.answers import MultiChoiceAnswer, SingleChoiceAnswer, TextAnswer
from pyq.engine.attempt import AttemptMode, AttemptSession, Navigation
from pyq.engine.bank import QuestionBank, QuestionKind, load_bank_json
from pyq.engine.recorder import SessionRecorder
from pyq.engine.timer import CountdownTimer, exam_minutes
from pyq.errors import MalformedBankError, OutOfRangeError
from pyq.logging_setup import setup_console_logging
from pyq.serialization import serialize_question_view, serialize_result
from pyq.services.bank_service import serialize_bank_metadata
from pyq.services.session_service import SqlSessionStore
from pyq.utils import json_dump

setup_console_logging(logging.WARNING)

HELP = (
    "Commands: n(ext)  p(rev)  g <index>  a <answer>  t <option>  c(heck)  "
    "i(nfo)  s(ubmit)  r(eview)  q(uit)"
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Take previous-year question papers")
    commands = parser.add_subparsers(dest="command", required=True)

    inspect = commands.add_parser("inspect", help="Summarize a question bank")
    inspect.add_argument("bank", type=Path, help="Path to question-bank JSON")
    inspect.add_argument("--json", action="store_true", help="Print bank metadata as JSON")

    run = commands.add_parser("run", help="Take a question bank in the terminal")
    run.add_argument("bank", type=Path, help="Path to question-bank JSON")
    run.add_argument("--exam", action="store_true", help="Exam mode with countdown")
    run.add_argument("--subject", type=str, default="PYQ", help="Subject name")
    run.add_argument("--quiz-type", type=str, default="", help="Paper label")
    run.add_argument(
        "--no-save",
        action="store_true",
        help="Do not record the session in the database",
    )
    return parser.parse_args()


def read_bank(path: Path) -> QuestionBank:
    return load_bank_json(path.read_text(encoding="utf-8"))


def inspect_bank(bank: QuestionBank) -> None:
    kinds = {kind: 0 for kind in QuestionKind}
    for question in bank.questions:
        kinds[question.kind] += 1
    session = AttemptSession(bank)
    print(f"Entries:        {len(bank)}")
    print(f"Questions:      {bank.question_count} (displayed as {bank.total_display_count})")
    print(f"Total marks:    {bank.total_marks:g}")
    print(f"Exam countdown: {exam_minutes(bank.paper)} min")
    for kind, count in kinds.items():
        print(f"  {kind.value:<16} {count}")
    for index, info_index in sorted(session.links.items()):
        print(f"  Q{bank[index].display_number} -> info block at entry {info_index}")


def render(session: AttemptSession) -> None:
    view = serialize_question_view(session)
    header = view["progressText"]
    if view["clock"]:
        header += f"   [{view['clock']}]"
    print()
    print(header)
    if view["kind"] == QuestionKind.INFO.value:
        print(view["info"]["extraText"])
        return
    print(f"({view['typeLabel']}, {view['marks']:g} marks)")
    print(view["text"] or "(Image question)")
    selected = view["answer"] or {}
    chosen = set(selected.get("selectedIndices", []))
    if "selectedIndex" in selected:
        chosen.add(selected["selectedIndex"])
    for option in view["options"]:
        mark = "x" if option["index"] in chosen else " "
        flag = " (correct)" if option["isCorrect"] else ""
        print(f"  [{mark}] {option['index'] + 1}. {option['text']}{flag}")
    if "text" in selected:
        print(f"  Your answer: {selected['text']}")
    if view["correctAnswerText"]:
        print(f"  Correct: {view['correctAnswerText']}")
    if view["score"]:
        print(f"  {view['score']['correctAnswer']}")
        print(f"  {view['score']['message']}")
    if view["hasExtraInfo"]:
        print("  (extra info available: i)")


def parse_answer(session: AttemptSession, raw: str):
    kind = session.current.kind
    if kind is QuestionKind.SINGLE_CHOICE:
        return SingleChoiceAnswer(int(raw) - 1)
    if kind is QuestionKind.MULTI_CHOICE:
        return MultiChoiceAnswer(frozenset(int(part) - 1 for part in raw.split(",") if part.strip()))
    return TextAnswer(raw)


def show_result(session: AttemptSession) -> None:
    result = serialize_result(session.result)
    print()
    print(f"Score: {result['score']:.1f}/{result['totalMarks']:.1f}")
    if result["percent"] is not None:
        print(f"Percent: {result['percent']:.1f}%  {result['feedback']}")
    for item in result["questions"]:
        print(f"  Q{item['number']}: {item['awarded']:g}/{item['marks']:g} {item['grade']}")


def run_quiz(args: argparse.Namespace, bank: QuestionBank) -> None:
    mode = AttemptMode.EXAM if args.exam else AttemptMode.PRACTICE
    session = AttemptSession(bank, mode)
    store = None
    if not args.no_save:
        init_db()
        store = SqlSessionStore(SessionLocal)
    recorder = SessionRecorder(store)

    timer = None
    if mode is AttemptMode.EXAM:
        timer = CountdownTimer(
            session,
            on_threshold=lambda urgency, remaining: print(f"\n[{urgency.value}] {remaining}s left"),
            on_expire=lambda _result: print("\nTime is up. Your answers were submitted."),
        )
        timer.start()

    print(HELP)
    try:
        while True:
            render(session)
            try:
                line = input("> ").strip()
            except EOFError:
                line = "q"
            command, _, arg = line.partition(" ")
            try:
                if command == "n":
                    if session.next() is Navigation.CONFIRM_SUBMIT:
                        if input("Submit now? [y/N] ").strip().lower() == "y":
                            command = "s"
                elif command == "p":
                    session.previous()
                elif command == "g":
                    session.go_to(int(arg))
                elif command == "a":
                    if not session.record_answer(session.attempt.current_index, parse_answer(session, arg)):
                        print("Answer not accepted.")
                elif command == "t":
                    session.toggle_option(session.attempt.current_index, int(arg) - 1)
                elif command == "c":
                    if session.check_current() is None:
                        print("Checking is not available here.")
                elif command == "i":
                    info = session.extra_info_for(session.attempt.current_index)
                    print(info.extra_text if info else "No extra info.")
                elif command == "r":
                    session.enter_review()
                elif command == "q":
                    if session.abandon() is not None:
                        recorder.finalize(session, args.subject, args.quiz_type)
                    return
                elif command:
                    print(HELP)
            except (ValueError, OutOfRangeError) as e:
                print(f"Invalid input: {e}")

            if command == "s" or (session.result is not None and session.summary is None):
                if timer is not None:
                    timer.cancel()
                session.submit()
                recorder.finalize(session, args.subject, args.quiz_type)
                show_result(session)
                print("Enter r to review, q to leave.")
    finally:
        if timer is not None:
            timer.cancel()


def main() -> None:
    args = parse_args()
    try:
        bank = read_bank(args.bank)
    except (OSError, MalformedBankError) as e:
        raise SystemExit(f"Cannot load {args.bank}: {e}")

    if args.command == "inspect" and args.json:
        print(json_dump(serialize_bank_metadata(args.bank.stem, bank)))
    elif args.command == "inspect":
        inspect_bank(bank)
    else:
        run_quiz(args, bank)


if __name__ == "__main__":
    main()
