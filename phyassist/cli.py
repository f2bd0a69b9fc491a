import argparse, logging, sys
from pathlib import Path

from phyassist import api, web
from phyassist.client import FeedbackClient
from phyassist.config import ClientConfig, ServiceConfig
from phyassist.render import render_feedback
from phyassist.submission import Submission, SubmissionState

logger = logging.getLogger("phyassist")

HTML_PAGE = """<!doctype html>
<meta charset="utf-8" />
<title>PhyAssist feedback</title>
<div style="max-width:800px;margin:2rem auto;line-height:1.7;font-family:system-ui,sans-serif">{body}</div>
"""


def run_api(args) -> int:
    config = ServiceConfig.from_env()
    if config.model is None:
        logger.warning("OPENAI_API_KEY is not set; /api/feedback will answer 500")
    port = args.port or config.port
    api.create_app(config).run(host="0.0.0.0", port=port)
    return 0


def run_web(args) -> int:
    config = ClientConfig.from_env()
    if not config.api_url:
        logger.warning("PHYASSIST_API_URL is not set; submissions will show a configuration error")
    port = args.port or config.port
    web.create_app(config).run(host="0.0.0.0", port=port)
    return 0


def run_ask(args, client=None) -> int:
    config = ClientConfig.from_env()
    if client is None and config.api_url:
        client = FeedbackClient(config.api_url, timeout=config.timeout)

    sub = Submission(client)
    path = Path(args.image)
    try:
        data = path.read_bytes()
    except OSError as e:
        print(f"Error: could not read {path}: {e}", file=sys.stderr)
        return 1
    sub.choose_file(data, path.name)

    if sub.submit(args.question) is not SubmissionState.SUCCESS:
        print(f"Error: {sub.error}", file=sys.stderr)
        return 1

    if args.html:
        Path(args.html).write_text(HTML_PAGE.format(body=render_feedback(sub.feedback)), encoding="utf-8")
        print(f"Feedback written to {args.html}")
    else:
        print(sub.feedback)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="phyassist", description="PhyAssist physics tutoring feedback")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("api", help="Run the feedback proxy service")
    p.add_argument("--port", type=int, help="Listening port (default $PORT or 8080)")
    p.set_defaults(func=run_api)

    p = sub.add_parser("web", help="Run the student-facing form")
    p.add_argument("--port", type=int, help="Listening port (default $PORT or 3000)")
    p.set_defaults(func=run_web)

    p = sub.add_parser("ask", help="Submit one question and solution photo")
    p.add_argument("question", help="The question the student was solving")
    p.add_argument("image", help="PNG or JPEG photo of the handwritten solution")
    p.add_argument("--html", help="Write the rendered feedback to this HTML file")
    p.set_defaults(func=run_ask)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)
