from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from ensemble.config import LOG_LEVEL, OUTPUT_DIR
from ensemble.detector import demo_analysis
from ensemble.service import LightingDesignService


def _open_demo_session(service: LightingDesignService) -> str:
    res = service.upload(b"", image_meta={})
    return str(res.data["sessionId"])


def _generate(service: LightingDesignService, session_id: str, room_id: str):
    res = service.generate_design(session_id, room_id)
    if not res.ok:
        print(f"[ERROR] {res.message}")
        print("        Run `ensemble rooms` to list the available room ids.")
    return res


def _cmd_rooms(args: argparse.Namespace) -> int:
    analysis = demo_analysis()
    print("Demo floor plan")
    for room in analysis.rooms:
        print(f"  {room.id:<8} {room.type:<9} {room.name} ({room.area})")
    return 0


def _cmd_design(args: argparse.Namespace) -> int:
    service = LightingDesignService()
    sid = _open_demo_session(service)
    res = _generate(service, sid, args.room_id)
    if not res.ok:
        return 2
    design = res.data["design"]
    if args.json:
        print(json.dumps(design, indent=2, ensure_ascii=False))
        return 0

    metrics = design["metrics"]
    print(f"Ensemble Design: {design['roomName']} ({design['roomType']})")
    for fx in design["fixtures"]:
        pos = fx["position"]
        print(f"  {fx['id']:<16} {fx['type']:<12} at ({pos['x']:g}, {pos['y']:g})")
    print(f"  Cost: ${design['totalCost']}")
    print(
        f"  Power: {metrics['totalWatts']}W ({metrics['wattsPerSqFt']}W/sq.ft), "
        f"energy code {'met' if metrics['meetsEnergyCode'] else 'exceeded'}"
    )
    return 0


def _cmd_chat(args: argparse.Namespace) -> int:
    service = LightingDesignService()
    sid = _open_demo_session(service)
    if not _generate(service, sid, args.room_id).ok:
        return 2
    for message in args.message:
        res = service.chat(sid, args.room_id, message)
        print(f"> {message}")
        print(res.message)
        if not res.ok:
            return 3
    final = service.get_design(sid, args.room_id)
    print(f"Final: {len(final.data['fixtures'])} fixtures, ${final.data['cost']}")
    return 0


def _cmd_report(args: argparse.Namespace) -> int:
    # Import here so the other commands work without the plotting stack loaded
    from ensemble.plotting import plot_design
    from ensemble.reporting import render_design_pdf

    service = LightingDesignService()
    sid = _open_demo_session(service)
    if not _generate(service, sid, args.room_id).ok:
        return 2
    session = service.store.require(sid)
    room = session.room(args.room_id)
    design = session.design(args.room_id)

    outdir = Path(args.out).expanduser().resolve()
    png = plot_design(design, room, outdir / f"{room.id}_plan.png", service.catalog)
    print("Ensemble Report")
    print(f"  Saved: {png}")
    if args.pdf:
        pdf = render_design_pdf(design, room, outdir / f"{room.id}_report.pdf", plan_png=png, catalog=service.catalog)
        print(f"  Saved: {pdf}")
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="ensemble")
    p.add_argument("--log-level", default=LOG_LEVEL, help="Logging level (default from ENSEMBLE_LOG_LEVEL)")
    sub = p.add_subparsers(dest="cmd", required=True)

    rooms = sub.add_parser("rooms", help="List the rooms of the demo floor plan.")
    rooms.set_defaults(func=_cmd_rooms)

    d = sub.add_parser("design", help="Generate the lighting design for a demo room.")
    d.add_argument("room_id", help="Room id, e.g. room_1")
    d.add_argument("--json", action="store_true", help="Print the design as JSON")
    d.set_defaults(func=_cmd_design)

    c = sub.add_parser("chat", help="Generate a design, then apply chat requests in order.")
    c.add_argument("room_id", help="Room id, e.g. room_1")
    c.add_argument("-m", "--message", action="append", required=True, help="Chat message (repeatable)")
    c.set_defaults(func=_cmd_chat)

    r = sub.add_parser("report", help="Save a plan PNG and optionally a PDF report for a demo room.")
    r.add_argument("room_id", help="Room id, e.g. room_1")
    r.add_argument("--out", default=str(OUTPUT_DIR), help=f"Output directory (default: {OUTPUT_DIR})")
    r.add_argument("--pdf", action="store_true", help="Also generate a PDF report")
    r.set_defaults(func=_cmd_report)

    args = p.parse_args(argv)
    logging.basicConfig(level=str(args.log_level).upper(), format="%(levelname)s %(name)s: %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
