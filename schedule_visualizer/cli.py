"""
Command-line interface: parse pasted/OCR schedule text, keep the working
course list and named schedules, show the weekly grid, export to file.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .export import DEFAULT_TIMEZONE, export
from .grid import calculate_total_hours, format_time_display, render_text
from .models import DAY_NAMES
from .ocr_text import parse_ocr_text
from .schedule_text import extract_schedule
from .sources import read_source_text
from .storage import JsonFileStore, ScheduleLibrary, WorkingSchedule, default_store_path

logger = logging.getLogger(__name__)


def _describe(course) -> str:
    days = "TBA" if course.is_tba else ", ".join(DAY_NAMES.get(d, d) for d in course.days) or "-"
    if course.is_tba or not course.has_time:
        time = "TBA"
    else:
        time = f"{format_time_display(course.start_time)} - {format_time_display(course.end_time)}"
    room = "TBA" if course.is_tba or not course.room else course.room
    return (
        f"{course.code:<10} | {course.section or '-':<12} | {(course.title or '-')[:30]:<30} | "
        f"{days:<20} | {time:<19} | {room}"
    )


def _print_courses(courses) -> None:
    print("Code       | Section      | Title                          | Days                 | Time                | Room")
    print("-" * 110)
    for c in courses:
        print(_describe(c))


def _cmd_parse(args, working: WorkingSchedule) -> int:
    text = read_source_text(args.parse)
    if not text.strip():
        print("Error: Please paste your schedule data first.", file=sys.stderr)
        return 1

    if args.ocr:
        sessions = parse_ocr_text(text)
        missing_sections = False
    else:
        result = extract_schedule(text)
        sessions = result.sessions
        missing_sections = result.missing_sections
        logger.debug("Format: %s (fallback=%s)", result.format, result.used_fallback)

    if not sessions:
        print("Could not parse courses. Check format, or add them manually.", file=sys.stderr)
        return 1

    if args.new:
        working.replace(sessions)
    else:
        working.add(sessions)
    action = "Loaded" if args.new else "Added"
    print(f"{action} {len(sessions)} course(s)!")
    _print_courses(sessions)
    if missing_sections:
        codes = sorted({s.code for s in sessions})
        print(
            "\nNote: the study load format doesn't include sections (e.g. G1, D3). "
            f"Imported courses: {', '.join(codes)}"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description=(
            "Turn class schedules pasted from the enrollment portal (or OCR text) into a weekly timetable.\n"
            "- Parsed courses are added to a working list kept in a local JSON store."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--store",
        metavar="PATH",
        help="JSON store file. Default: $SCHEDULE_VISUALIZER_STORE or ~/.schedule_visualizer.json",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show parser debug output.")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--parse",
        metavar="TEXT_PATH",
        help="Parse a text file (or saved HTML page, or '-' for stdin) and add its courses to the working list.",
    )
    mode.add_argument("--show", action="store_true", help="List the working courses and the weekly grid.")
    mode.add_argument("--clear", action="store_true", help="Remove all courses from the working list.")
    mode.add_argument("--save-as", metavar="NAME", help="Save the working list as a named schedule.")
    mode.add_argument("--list-schedules", action="store_true", help="List saved schedules.")
    mode.add_argument("--load-schedule", metavar="ID", help="Replace the working list with a saved schedule.")
    mode.add_argument("--delete-schedule", metavar="ID", help="Delete a saved schedule.")
    mode.add_argument("--export-schedules", metavar="JSON_PATH", help="Write all saved schedules to a JSON file.")
    mode.add_argument("--import-schedules", metavar="JSON_PATH", help="Import schedules from an exported JSON file.")
    mode.add_argument("--export", action="store_true", help="Export the working list (see -o / -f).")

    parser.add_argument("--ocr", action="store_true", help="(--parse) Treat the input as raw OCR output.")
    parser.add_argument("--new", action="store_true", help="(--parse) Start a new list instead of adding to it.")
    parser.add_argument("--replace", action="store_true", help="(--save-as) Overwrite a schedule with the same name.")
    parser.add_argument(
        "-o",
        "--output",
        default="class_schedule",
        help="(--export) Output path (without extension). Default: class_schedule",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["ics", "csv", "json"],
        default="ics",
        help="(--export) Export format. Default: ics",
    )
    parser.add_argument("--term-start", metavar="YYYY-MM-DD", help="(ICS) First day of classes.")
    parser.add_argument("--term-end", metavar="YYYY-MM-DD", help="(ICS) Last day of classes.")
    parser.add_argument(
        "--timezone",
        default=DEFAULT_TIMEZONE,
        help=f"(ICS) Calendar timezone. Default: {DEFAULT_TIMEZONE}",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        store = JsonFileStore(args.store or default_store_path())
        working = WorkingSchedule(store)
        library = ScheduleLibrary(store)

        if args.parse:
            return _cmd_parse(args, working)

        if args.show:
            if not working.courses:
                print("No courses yet. Use --parse to add some.")
                return 0
            _print_courses(working.courses)
            print()
            print(render_text(working.courses))
            print(f"\nTotal: {calculate_total_hours(working.courses)} hour(s) per week")
            return 0

        if args.clear:
            working.clear()
            print("All courses cleared")
            return 0

        if args.save_as:
            schedule = library.save(args.save_as, working.courses, replace=args.replace)
            print(f'Schedule "{schedule.name}" saved! (id {schedule.id})')
            return 0

        if args.list_schedules:
            if not library.schedules:
                print("No saved schedules yet.")
                return 0
            print("ID                               | Name                     | Courses | Saved")
            print("-" * 90)
            for s in library.schedules:
                print(
                    f"{s.id:<32} | {s.name[:24]:<24} | "
                    f"{s.unique_courses:>3} ({s.course_count} sessions) | {s.created_at}"
                )
            return 0

        if args.load_schedule:
            schedule = library.get(args.load_schedule)
            if schedule is None:
                print(f"Error: Schedule not found: {args.load_schedule}", file=sys.stderr)
                return 1
            working.replace([c.with_id() for c in schedule.courses])
            print(f'Loaded "{schedule.name}" ({schedule.course_count} session(s))')
            return 0

        if args.delete_schedule:
            schedule = library.delete(args.delete_schedule)
            print(f'Deleted "{schedule.name}"')
            return 0

        if args.export_schedules:
            count = library.export_file(args.export_schedules)
            print(f"Exported {count} schedule(s) to {args.export_schedules}")
            return 0

        if args.import_schedules:
            imported = library.import_file(args.import_schedules)
            print(f"Imported {len(imported)} schedule(s)!")
            return 0

        if args.export:
            if not working.courses:
                print("Error: No courses to export.", file=sys.stderr)
                return 1
            ext = {"ics": ".ics", "csv": ".csv", "json": ".json"}[args.format]
            out_path = Path(args.output).with_suffix(ext) if Path(args.output).suffix else Path(args.output + ext)
            options = {}
            if args.format == "ics":
                options = dict(term_start=args.term_start, term_end=args.term_end, tz_name=args.timezone)
            count = export(working.courses, out_path, args.format, **options)
            print(f"Exported {count} item(s) to {out_path}")
            return 0
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    parser.print_help(sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
