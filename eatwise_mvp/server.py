import argparse
import json
import logging
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from eatwise.api import create_app
from eatwise.config import Settings
from eatwise.errors import ClientInputError
from eatwise.pipeline import AnalysisPipeline


def analyze_file(pipeline: AnalysisPipeline, path: Path) -> int:
    try:
        report = pipeline.analyze(path.read_bytes())
    except ClientInputError as e:
        print(f"[once] rejected: {e}", file=sys.stderr)
        return 2
    print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    return 0


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--once", metavar="IMAGE", help="Analyze a single label image and print the report")
    ap.add_argument("--serve", action="store_true", help="Run the HTTP API")
    ap.add_argument("--host", default="0.0.0.0")
    ap.add_argument("--port", type=int, default=None, help="Defaults to $PORT or 5000")
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args()

    load_dotenv()
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    s = Settings.from_env()
    pipeline = AnalysisPipeline.from_settings(s)

    if args.once:
        raise SystemExit(analyze_file(pipeline, Path(args.once)))

    if args.serve:
        app = create_app(pipeline, max_upload_bytes=s.max_upload_bytes)
        uvicorn.run(app, host=args.host, port=args.port or s.port)
        return

    ap.print_help()


if __name__ == "__main__":
    main()
