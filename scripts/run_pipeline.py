#!/usr/bin/env python3
"""
Run a punching job: nest -> optimize -> emit one program per sheet.

Job file (JSON):
    {
        "name": "JOB1",
        "tools": [{"id": "T1", "shape": "circle", "width": 10, ...}],
        "parts": [{"id": "P1", "width": 200, "height": 100, "punches": [...]}],
        "schedule": [{"part_id": "P1", "quantity": 4}],
        "nesting": {...}, "optimizer": {...}, "machine": {...}
    }

The optional "nesting", "optimizer" and "machine" sections override the
same sections of the configuration file key by key.

Usage:
    turretcam-run job.json --out out/ [--config cfg.json] [--program-number 100]
                  [--dxf] [--preview] [--verbose]
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from config.machine_config import (
    create_machine_settings_from_config,
    create_nesting_settings_from_config,
    create_optimizer_settings_from_config,
    load_config,
)
from config.settings import LOG_FORMAT, LOG_LEVEL, PROGRAM_EXTENSION
from core.events import setup_event_logging
from core.exceptions import TurretCamError, ConfigurationError
from core.models import Part, ScheduledPart, Tool
from nesting import NestingEngine, export_sheet_dxf
from postprocessor import emit, save_program
from toolpath import estimate_cycle_time, optimize, start_cursor, travel_stats

logger = logging.getLogger(__name__)


def load_job(path: str) -> Dict[str, Any]:
    """
    Read a job file.

    Raises:
        ConfigurationError: Missing file or malformed JSON
    """
    job_path = Path(path)
    if not job_path.exists():
        raise ConfigurationError(f"Job file not found: {job_path}", path=str(job_path))
    try:
        with open(job_path, 'r', encoding='utf-8') as f:
            job = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid job JSON: {e}", path=str(job_path)) from e
    if not isinstance(job, dict):
        raise ConfigurationError("Job root must be an object", path=str(job_path))
    job.setdefault('name', job_path.stem)
    return job


def merge_config(config: Dict[str, Any], job: Dict[str, Any]) -> Dict[str, Any]:
    """Configuration with the job's section overrides applied"""
    merged = dict(config)
    for section in ('machine', 'optimizer', 'nesting'):
        if section in job:
            merged[section] = {**config.get(section, {}), **job[section]}
    return merged


def run_job(job: Dict[str, Any], config: Dict[str, Any], out_dir: str,
            program_number: int = 1, dxf: bool = False, preview: bool = False) -> Dict[str, Any]:
    """
    Nest, optimize and emit a job.

    Args:
        job: Job dictionary (see module docstring)
        config: Configuration dictionary
        out_dir: Output directory
        program_number: O number of the first sheet; later sheets count up
        dxf: Also write a DXF layout per sheet
        preview: Also write a PNG preview per sheet

    Returns:
        Run summary (also written as <name>_summary.json)
    """
    config = merge_config(config, job)
    machine = create_machine_settings_from_config(config)
    optimizer_settings = create_optimizer_settings_from_config(config)
    nesting_settings = create_nesting_settings_from_config(config)

    tools = [Tool.from_dict(t) for t in job.get('tools', [])]
    parts = [Part.from_dict(p) for p in job.get('parts', [])]
    schedule = [ScheduledPart.from_dict(s) for s in job.get('schedule', [])]
    name = job['name']

    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    logger.info(f"Job {name}: {len(parts)} parts, {len(tools)} tools, "
                f"{sum(s.quantity for s in schedule)} pieces scheduled")

    run = NestingEngine(parts, tools, nesting_settings).run(schedule)

    sheets_summary: List[Dict[str, Any]] = []
    for index, sheet in enumerate(run.sheets):
        ops = optimize(sheet, parts, tools, optimizer_settings)
        filename = f"{name}-{sheet.id}"
        text = emit(ops, machine, nesting_settings.clamp_positions, program_number + index,
                    filename, sheet=sheet, tools=tools)
        program_path = save_program(text, out / f"{filename}{PROGRAM_EXTENSION}")

        home = start_cursor(sheet, optimizer_settings.start_corner).position
        stats = travel_stats(ops, home)
        cycle = estimate_cycle_time(ops, machine, home)

        entry = {
            'sheet_id': sheet.id,
            'stock_sheet_id': sheet.stock_sheet_id,
            'quantity': sheet.quantity,
            'parts': sheet.part_count,
            'used_area': round(sheet.used_area, 2),
            'scrap_percentage': round(sheet.scrap_percentage, 2),
            'program': program_path,
            'travel': stats.to_dict(),
            'cycle_time': cycle.to_dict(),
        }

        if dxf:
            entry['dxf'] = export_sheet_dxf(sheet, parts, str(out / f"{filename}.dxf"),
                                            nesting_settings)
        if preview:
            from nesting.preview import render_sheet_preview
            entry['preview'] = render_sheet_preview(sheet, parts, str(out / f"{filename}.png"))

        sheets_summary.append(entry)

    summary = {
        'job': name,
        'sheets': sheets_summary,
        'unplaced': [
            {'uid': u.uid, 'part_id': u.part_id, 'reason': u.reason} for u in run.unplaced
        ],
        'total_parts': run.total_parts,
    }
    summary_path = out / f"{name}_summary.json"
    with open(summary_path, 'w', encoding='utf-8') as f:
        json.dump(summary, f, indent=2)
    logger.info(f"Saved: {summary_path}")
    return summary


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Nest a punching job and write one program per sheet"
    )
    parser.add_argument("job", help="Job JSON file")
    parser.add_argument("--out", required=True, help="Output directory")
    parser.add_argument("--config", help="Configuration JSON (default: config/default_config.json)")
    parser.add_argument("--program-number", type=int, default=1,
                        help="O number of the first sheet (default: 1)")
    parser.add_argument("--dxf", action="store_true", help="Write a DXF layout per sheet")
    parser.add_argument("--preview", action="store_true", help="Write a PNG preview per sheet")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else LOG_LEVEL, format=LOG_FORMAT)
    if args.verbose:
        setup_event_logging()

    try:
        job = load_job(args.job)
        config = load_config(args.config)
        summary = run_job(job, config, args.out, args.program_number,
                          dxf=args.dxf, preview=args.preview)
    except (TurretCamError, OSError) as e:
        logger.error(f"Job failed: {e}")
        return 1

    logger.info(f"Job {summary['job']}: {len(summary['sheets'])} sheets, "
                f"{len(summary['unplaced'])} unplaced")
    return 0 if not summary['unplaced'] else 2


if __name__ == "__main__":
    sys.exit(main())
