# Runs one resume analysis headlessly on local files and writes the results to the output directory
import argparse
from datetime import datetime as dt

from dotenv import load_dotenv

from .factories.service_factory import build_services
from .graph.events import AnalysisResult, ErrorEvent, ProgressEvent
from .graph.graph import PipelineGraph
from .spec.loader import DEFAULT_CONFIG_PATH, load_pipeline_config, load_provider_config
from .spec.models import PdfSource, UrlSource, UserOptions
from .utils.file import read_bytes, write_json, write_to_file
from .utils.logger import JSONLLogger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Analyze a resume against a job description")
    parser.add_argument("resume", help="Path to the resume PDF")

    jd = parser.add_mutually_exclusive_group(required=True)
    jd.add_argument("--jd-url", help="URL of the job posting")
    jd.add_argument("--jd-pdf", help="Path to the job description PDF")

    parser.add_argument("--cover-letter", help="Path to an existing cover letter PDF")
    parser.add_argument("--format", dest="resume_format", default="chronological",
                        choices=["chronological", "hybrid", "functional"])
    parser.add_argument("--target-ats", default="generic", choices=["workday", "greenhouse", "lever", "generic"])
    parser.add_argument("--region", default="us", choices=["eu", "uk", "us", "india", "germany", "uae"])
    parser.add_argument("--length", dest="cover_letter_length", default="medium", choices=["short", "medium", "long"])
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH)
    parser.add_argument("--draw", action="store_true", help="Save a mermaid image of the pipeline graph")

    # Read in test name
    time = dt.now().strftime("%Y-%m-%d_%H-%M-%S")
    parser.add_argument("--test_name", default=time)
    return parser


def print_progress(event):
    if isinstance(event, ProgressEvent):
        print(f"[{event.percent:>3}%] {event.stage.value}: {event.message}")
    elif isinstance(event, ErrorEvent):
        print(f"[error] {event.message}")
    else:
        print(f"[100%] {event.message}")


def main(argv=None):
    load_dotenv()
    args = build_parser().parse_args(argv)

    config = load_pipeline_config(args.config)

    # Logging
    log_path = config.log_path or f"logs/pipeline_runs_{args.test_name}.jsonl"
    logger = JSONLLogger(log_path=log_path)

    services = build_services(config=config, logger=logger)
    graph = PipelineGraph(services)

    if args.draw:
        graph.draw() # Optional

    if args.jd_url:
        jd_source = UrlSource(value=args.jd_url)
    else:
        jd_source = PdfSource(data=read_bytes(args.jd_pdf))

    options = UserOptions(
        resume_format=args.resume_format,
        target_ats=args.target_ats,
        region=args.region,
        cover_letter_length=args.cover_letter_length,
    )

    state = graph.run(
        resume_bytes=read_bytes(args.resume),
        jd_source=jd_source,
        options=options,
        llm_config=load_provider_config(),
        cover_letter_bytes=read_bytes(args.cover_letter),
        on_progress=print_progress,
        run_id=args.test_name,
    )

    result = AnalysisResult.from_state(state)
    output_dir = f"output/{args.test_name}"
    results_path = write_json(result, "analysis.json", output_dir=output_dir)
    if result.generated_cover_letter is not None:
        write_to_file(result.generated_cover_letter.content, "cover_letter.txt", output_dir=output_dir)
    if result.generated_resume is not None:
        write_to_file(result.generated_resume.content.to_text(), "resume.txt", output_dir=output_dir)

    # Console summary
    print("\n" + "="*60)
    print("RESUME ANALYSIS - EXECUTION COMPLETE\n" + "="*60)
    scores = result.ats_scores
    if scores is not None and scores.target_system is not None:
        print(f"Target ATS score ({scores.target_system.system}, {scores.target_system.model}): {scores.target_system.score}")
    if scores is not None and scores.score_change_explanation:
        print(scores.score_change_explanation)
    if result.halted:
        print("Run halted: the job posting was flagged as fraudulent.")
    for error in result.errors:
        print(f"[{error.stage}] {error.message}")
    print("="*60, f"\n\nResults written to {results_path}")

    return 0 if result.completed_at else 1


if __name__ == "__main__":
    raise SystemExit(main())
