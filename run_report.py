"""Standalone script: generate one AI visibility report synchronously and exit."""
import argparse
import sys
import os
import logging

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

os.makedirs(os.path.join(os.path.dirname(__file__), "logs"), exist_ok=True)

logging.basicConfig(
    filename=os.path.join(os.path.dirname(__file__), "logs", "report.log"),
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate an AI visibility report for a business website.")
    parser.add_argument("website", help="Business website (http:// or https://)")
    parser.add_argument("--name", help="Business name (detected from the website when omitted)")
    parser.add_argument("--type", dest="business_type", help="Business type, e.g. 'plumbing service'")
    parser.add_argument("--location", help="Business location, e.g. 'Austin, TX'")
    parser.add_argument("--competitor", action="append", default=[], help="Known competitor website (repeatable)")
    parser.add_argument("--pdf", action="store_true", help="Also export the report to PDF")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.info(f"=== Report starting: {args.website} ===")
    try:
        from reports.generator import ReportGenerator

        generator = ReportGenerator()
        report_id = generator.create({
            "target_website": args.website,
            "business_name": args.name,
            "business_type": args.business_type,
            "business_location": args.location,
            "competitor_websites": args.competitor,
        })

        def show_progress(phase, total, message):
            print(f"[{phase}/{total}] {message}")

        report = generator.generate(report_id, progress_callback=show_progress)
    except Exception as e:
        logging.error(f"Report failed: {e}", exc_info=True)
        print(f"Report failed: {e}")
        sys.exit(1)

    if report["status"] != "completed":
        print(f"Report #{report_id} failed: {report.get('error_message')}")
        sys.exit(1)

    print(f"Report #{report_id} completed. Overall score: {report['overall_score']}/100")
    print(f"Share link: {report['share_url']}")

    if args.pdf:
        from reports.pdf_report import generate_pdf
        path = generate_pdf(report)
        print(f"PDF saved to: {path}")


if __name__ == "__main__":
    main()
