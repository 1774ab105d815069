"""Command line entry point for inspecting and driving story mode progress."""

from __future__ import annotations

import argparse
import logging
import random
from typing import List, Optional, Sequence

from .combos import BoxingComboGenerator, Difficulty
from .config import get_settings
from .exam_questions import ExamQuestionGenerator
from .learner_state import progress_for
from .lock_status import arsenal_allowed_codes, unlocked_move_codes
from .logging_config import configure_logging
from .moves import boxing_catalog
from .progression import required_progression_sessions
from .story_mode import StoryModeController
from .training_preferences import TrainingPreferences

logger = logging.getLogger("shadowcoach.cli")


def _print_status(controller: StoryModeController) -> None:
    for unit in controller.curriculum:
        progress = progress_for(controller.state, unit.id)
        marker = "x" if progress.is_unlocked else " "
        print(
            f"[{marker}] {unit.id:>2} {unit.display_name:<20} L{unit.level} "
            f"drill={int(progress.drill_done)} arsenal={int(progress.add_to_arsenal_done)} "
            f"sessions={progress.progression_sessions_done}/{required_progression_sessions(unit.level)} "
            f"exam={int(progress.exam_passed)}"
        )
    action = controller.next_action
    print(f"next: {action.type}" + (f" (unit {action.unit_id})" if action.unit_id is not None else ""))


def _combo(
    controller: StoryModeController,
    generator: BoxingComboGenerator,
    difficulty: str,
    count: int,
    arsenal: bool,
    included: Optional[Sequence[str]] = None,
) -> None:
    action = controller.next_action
    unlocked = unlocked_move_codes(controller.state, controller.curriculum)
    training_codes: Optional[List[str]] = None
    if unlocked:
        preferences = (
            TrainingPreferences.default_with(unlocked)
            if included is None
            else TrainingPreferences.empty().include_all(included)
        )
        training_codes = preferences.allowed_codes(unlocked)
    else:
        logger.info("No moves unlocked yet; drawing training combos from the whole catalog")

    previous = None
    for _ in range(count):
        if arsenal and action.unit_id is not None:
            unit = controller.curriculum.get_by_id(action.unit_id)
            target = unit.move_codes[0] if unit else ""
            arsenal_codes = arsenal_allowed_codes(controller.state, action.unit_id, controller.curriculum)
            previous = generator.generate_weighted(difficulty, target, arsenal_codes, previous)
        else:
            previous = generator.generate(difficulty, previous, training_codes)
        print("-".join(previous.move_codes))


def _exam(controller: StoryModeController, count: int, seed: Optional[int]) -> int:
    unit = controller.current_unit
    if unit is None:
        print("All units are unlocked.")
        return 0
    target = boxing_catalog.get_by_code(unit.move_codes[0])
    if target is None:
        logger.error("Unit %s teaches unknown move code %s", unit.id, unit.move_codes[0])
        return 1
    unlocked = []
    for code in unlocked_move_codes(controller.state, controller.curriculum):
        move = boxing_catalog.get_by_code(code)
        if move is not None:
            unlocked.append(move)
    questions = ExamQuestionGenerator(random.Random(seed)).generate(target, unlocked, count)
    for index, question in enumerate(questions, 1):
        print(f"{index:>2}. {question.code}: {' | '.join(question.options)}")
    return 0


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="shadowcoach", description="Shadow-boxing story mode coach.")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("status", help="Show progress for every unit and the next action.")

    for name, help_text in (
        ("drill", "Mark the current unit's drill as done."),
        ("session", "Record one progression session for the current unit."),
        ("exam-pass", "Record a passed exam for the current unit."),
    ):
        commands.add_parser(name, help=help_text)

    arsenal = commands.add_parser("arsenal", help="Record the Add-to-Arsenal session for a unit.")
    arsenal.add_argument("unit_id", type=int)

    unlock = commands.add_parser("unlock", help="Instantly unlock a unit.")
    unlock.add_argument("unit_id", type=int)

    commands.add_parser("reset", help="Discard all progress.")

    combo = commands.add_parser("combo", help="Generate combos from the unlocked moves.")
    combo.add_argument("--difficulty", choices=[tier.value for tier in Difficulty], default=Difficulty.BEGINNER.value)
    combo.add_argument("--count", type=int, default=5)
    combo.add_argument("--seed", type=int, default=None)
    combo.add_argument("--arsenal", action="store_true", help="Bias combos towards the current unit's move.")
    combo.add_argument(
        "--include",
        action="append",
        metavar="CODE",
        help="Restrict training combos to this unlocked move code; repeat to include more.",
    )

    exam = commands.add_parser("exam", help="Print exam questions for the current unit.")
    exam.add_argument("--count", type=int, default=None)
    exam.add_argument("--seed", type=int, default=None)

    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    args = parse_args(argv)
    settings = get_settings()
    controller = StoryModeController.from_settings(settings)
    controller.init()

    if args.command == "drill":
        controller.mark_drill_done()
    elif args.command == "session":
        controller.mark_progression_session_done()
    elif args.command == "exam-pass":
        controller.mark_exam_passed()
    elif args.command == "arsenal":
        controller.mark_add_to_arsenal_done(args.unit_id)
    elif args.command == "unlock":
        controller.unlock_move(args.unit_id)
    elif args.command == "reset":
        controller.reset()
    elif args.command == "combo":
        if args.seed is not None:
            generator = BoxingComboGenerator(rng=random.Random(args.seed))
        else:
            generator = BoxingComboGenerator.from_settings(settings)
        _combo(controller, generator, args.difficulty, args.count, args.arsenal, args.include)
        return 0
    elif args.command == "exam":
        seed = args.seed if args.seed is not None else settings.combo_seed
        count = args.count if args.count is not None else settings.exam_question_count
        return _exam(controller, count, seed)

    _print_status(controller)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
