from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ensemble.catalog import DEFAULT_CATALOG, FixtureSpec
from ensemble.metrics import ENERGY_CODE_LIMIT_W_PER_SQFT, cost_breakdown
from ensemble.schema import Design, Room
from ensemble.units import round_half_up


def _table(rows: List[List[str]], col_widths: List[float]) -> Table:
    t = Table(rows, colWidths=col_widths)
    t.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("ROWBACKGROUNDS", (0, 0), (-1, -1), [colors.whitesmoke, colors.white]),
                ("BOX", (0, 0), (-1, -1), 0.5, colors.lightgrey),
                ("INNERGRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
            ]
        )
    )
    return t


def build_fixture_schedule(design: Design, catalog: Mapping[str, FixtureSpec] = DEFAULT_CATALOG) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for kind, row in cost_breakdown(design.fixtures, catalog).items():
        spec = catalog[kind]
        rows.append(
            {
                "kind": kind,
                "count": int(row["count"]),
                "length_ft": row.get("length"),
                "cost": round_half_up(row["cost"]),
                "description": spec.description,
            }
        )
    return rows


def render_design_pdf(
    design: Design,
    room: Room,
    out_path: Path,
    plan_png: Optional[Path] = None,
    catalog: Mapping[str, FixtureSpec] = DEFAULT_CATALOG,
) -> Path:
    out_path = Path(out_path).expanduser().resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    m = design.metrics

    styles = getSampleStyleSheet()
    doc = SimpleDocTemplate(str(out_path), pagesize=A4, leftMargin=1.6 * cm, rightMargin=1.6 * cm, topMargin=1.6 * cm, bottomMargin=1.6 * cm)
    story = [Paragraph("Lighting Design Report", styles["Title"]), Spacer(1, 0.2 * cm)]
    story.append(
        _table(
            [
                ["Room", f"{room.name} ({room.id})"],
                ["Room type", room.type or "-"],
                ["Area", f"{m.room_area_sqft:g} sq ft"],
                ["Fixtures", str(len(design.fixtures))],
                ["Total cost", f"${design.total_cost}"],
            ],
            [6.0 * cm, 11.7 * cm],
        )
    )
    story.append(Spacer(1, 0.2 * cm))

    story.append(Paragraph("Energy", styles["Heading2"]))
    story.append(
        _table(
            [
                ["Total power", f"{m.total_watts:.1f} W"],
                ["Power density", f"{m.watts_per_sqft:.2f} W/sq ft"],
                ["Light output", f"{m.total_lumens} lm ({m.lumens_per_sqft} lm/sq ft)"],
                ["Energy code", f"{'PASS' if m.meets_energy_code else 'FAIL'} (limit {ENERGY_CODE_LIMIT_W_PER_SQFT} W/sq ft)"],
            ],
            [6.0 * cm, 11.7 * cm],
        )
    )
    story.append(Spacer(1, 0.2 * cm))

    story.append(Paragraph("Fixture Schedule", styles["Heading2"]))
    srows = [["kind", "count", "length (ft)", "cost", "description"]]
    for r in build_fixture_schedule(design, catalog):
        length = r["length_ft"]
        srows.append([r["kind"], str(r["count"]), "-" if length is None else f"{length:.1f}", f"${r['cost']}", r["description"]])
    story.append(_table(srows, [3.4 * cm, 1.5 * cm, 2.2 * cm, 2.0 * cm, 8.6 * cm]))
    story.append(Spacer(1, 0.2 * cm))

    story.append(Paragraph("Design Rationale", styles["Heading2"]))
    for entry in design.reasoning:
        story.append(Paragraph(f"<b>{escape(entry.kind)}</b>: {escape(entry.message)}", styles["BodyText"]))
    story.append(Spacer(1, 0.2 * cm))

    if plan_png is not None and Path(plan_png).exists():
        story.append(Paragraph("Plan View", styles["Heading2"]))
        story.append(Image(str(plan_png), width=16 * cm, height=12 * cm))

    doc.build(story)
    return out_path
