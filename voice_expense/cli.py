"""Command-line interface for voice expense parsing."""

import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import click
from tqdm import tqdm

from .currency import format_amount
from .expense import ParsedExpense, VoiceExpenseParser
from .export import ExcelExporter, export_json
from .parsers.category_parser import UNCATEGORIZED
from .review import ReviewQueue, ValidationResult
from .rules import load_categories

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
OUTPUT_SUFFIXES = ('.xlsx', '.json')


def configure_logging(debug: bool = False):
    """Send logs to stderr so stdout stays machine readable."""
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, stream=sys.stderr)
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug mode enabled - detailed parsing logs will be shown")


def resolve_categories(categories: Sequence[str], categories_file: Optional[Path]) -> List[str]:
    """Taxonomy from --category options and/or a file, else the packaged default."""
    names = list(categories)
    if categories_file is not None:
        names.extend(load_categories(categories_file))
    if not names:
        names = load_categories()
    return list(dict.fromkeys(names))


class BatchProcessor:
    """Parses many transcripts with a shared parser and tracks review items."""

    def __init__(self,
                 parser: VoiceExpenseParser,
                 valid_categories: Sequence[str],
                 reference_date: Optional[date] = None,
                 max_workers: int = 4):
        self.parser = parser
        self.valid_categories = tuple(valid_categories)
        self.reference_date = reference_date
        self.max_workers = max_workers
        self.review_queue = ReviewQueue(uncategorized_label=parser.uncategorized_label)

        self.stats = {
            'total': 0,
            'with_amount': 0,
            'with_date': 0,
            'uncategorized': 0,
            'review_items': 0,
        }

    def process_single(self, transcript: str) -> Tuple[ParsedExpense, ValidationResult]:
        parsed = self.parser.parse(transcript, self.valid_categories, self.reference_date)
        return parsed, self.parser.validate(parsed)

    def process_batch(self, transcripts: Sequence[str]) -> List[Tuple[ParsedExpense, ValidationResult]]:
        """
        Parse all transcripts in parallel.

        Args:
            transcripts: One utterance per entry

        Returns:
            (parsed, validation) pairs in input order
        """
        self.stats['total'] = len(transcripts)
        if not transcripts:
            logger.warning("No transcripts to process!")
            return []

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            results = list(tqdm(
                executor.map(self.process_single, transcripts),
                total=len(transcripts),
                desc="Parsing transcripts",
            ))

        # Review queue is filled afterwards so its order matches the input
        for parsed, validation in results:
            if parsed.amount:
                self.stats['with_amount'] += 1
            if parsed.date:
                self.stats['with_date'] += 1
            if parsed.category == self.parser.uncategorized_label:
                self.stats['uncategorized'] += 1
            self.review_queue.add_from_expense(parsed, validation)

        self.stats['review_items'] = len(self.review_queue.items)
        logger.info(f"Batch processing complete. Parsed: {self.stats['total']}, "
                    f"Review items: {self.stats['review_items']}")
        return results


def read_transcripts(path: Path) -> List[str]:
    """One transcript per non-blank line."""
    lines = path.read_text(encoding='utf-8').splitlines()
    return [line.strip() for line in lines if line.strip()]


def _reference_date(value: Optional[datetime]) -> Optional[date]:
    return value.date() if value is not None else None


@click.group()
@click.version_option(package_name="voice-expense-extractor")
def cli():
    """Voice Expense - Turn spoken expense notes into structured records."""
    pass


@cli.command()
@click.argument('text')
@click.option('--category', 'categories', multiple=True,
              help='Category name from your taxonomy (repeatable)')
@click.option('--categories', 'categories_file', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='File with category names (YAML with a categories list, or one per line)')
@click.option('--date', 'reference_date', type=click.DateTime(formats=['%Y-%m-%d']),
              help='Reference date for relative expressions (default: today)')
@click.option('--rules', 'rules_dir', type=click.Path(exists=True, file_okay=False, path_type=Path),
              help='Directory with replacement rule tables')
@click.option('--currency', default='USD', show_default=True,
              help='Currency used for display when none was spoken')
@click.option('--uncategorized-label', default=UNCATEGORIZED, show_default=True,
              help='Category reported when nothing matched')
@click.option('--day-first', is_flag=True, help='Read 03/04/2025 as 3 April')
@click.option('--debug', is_flag=True, help='Enable debug output')
def parse(text: str,
          categories: Tuple[str, ...],
          categories_file: Optional[Path],
          reference_date: Optional[datetime],
          rules_dir: Optional[Path],
          currency: str,
          uncategorized_label: str,
          day_first: bool,
          debug: bool):
    """
    Parse a single transcript and print the result as JSON.

    Example:
        voice-expense parse "50tk on breakfast yesterday" --category "Food & Dining"
    """
    configure_logging(debug)
    try:
        parser = VoiceExpenseParser(rules_dir=rules_dir,
                                    uncategorized_label=uncategorized_label,
                                    day_first=day_first)
        valid_categories = resolve_categories(categories, categories_file)

        parsed = parser.parse(text, valid_categories, _reference_date(reference_date))
        validation = parser.validate(parsed)

        click.echo(json.dumps(parsed.to_dict(), ensure_ascii=False, indent=2))
        click.echo("")
        if parsed.amount:
            click.echo(f"Amount: {format_amount(parsed.amount, parsed.currency or currency)}")
        click.echo(f"Valid: {'yes' if validation.is_valid else 'no'}")
        for error in validation.errors:
            click.echo(f"  Error: {error}")
        for warning in validation.warnings:
            click.echo(f"  Warning: {warning}")

    except Exception as e:
        logger.error(f"Parsing failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option('--in', 'input_file', required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Text file with one transcript per line')
@click.option('--out', 'output_file', required=True, type=click.Path(dir_okay=False, path_type=Path),
              help='Output file (.xlsx or .json)')
@click.option('--category', 'categories', multiple=True,
              help='Category name from your taxonomy (repeatable)')
@click.option('--categories', 'categories_file', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='File with category names (YAML with a categories list, or one per line)')
@click.option('--date', 'reference_date', type=click.DateTime(formats=['%Y-%m-%d']),
              help='Reference date for relative expressions (default: today)')
@click.option('--rules', 'rules_dir', type=click.Path(exists=True, file_okay=False, path_type=Path),
              help='Directory with replacement rule tables')
@click.option('--currency', default='USD', show_default=True,
              help='Currency used for totals in the Excel summary')
@click.option('--uncategorized-label', default=UNCATEGORIZED, show_default=True,
              help='Category reported when nothing matched')
@click.option('--day-first', is_flag=True, help='Read 03/04/2025 as 3 April')
@click.option('--max-workers', default=4, type=click.IntRange(min=1), show_default=True,
              help='Maximum number of parallel workers')
@click.option('--summary', is_flag=True, help='Include summary section in Excel output')
@click.option('--debug', is_flag=True, help='Enable debug output')
def batch(input_file: Path,
          output_file: Path,
          categories: Tuple[str, ...],
          categories_file: Optional[Path],
          reference_date: Optional[datetime],
          rules_dir: Optional[Path],
          currency: str,
          uncategorized_label: str,
          day_first: bool,
          max_workers: int,
          summary: bool,
          debug: bool):
    """
    Parse a file of transcripts and export the results.

    Example:
        voice-expense batch --in notes.txt --out expenses.xlsx --summary
    """
    configure_logging(debug)

    if output_file.suffix.lower() not in OUTPUT_SUFFIXES:
        raise click.BadParameter(f"output must end in {' or '.join(OUTPUT_SUFFIXES)}",
                                 param_hint="'--out'")

    try:
        logger.info(f"Input file: {input_file}")
        logger.info(f"Output file: {output_file}")
        logger.info(f"Max workers: {max_workers}")

        parser = VoiceExpenseParser(rules_dir=rules_dir,
                                    uncategorized_label=uncategorized_label,
                                    day_first=day_first)
        valid_categories = resolve_categories(categories, categories_file)
        transcripts = read_transcripts(input_file)

        processor = BatchProcessor(parser, valid_categories,
                                   reference_date=_reference_date(reference_date),
                                   max_workers=max_workers)
        results = processor.process_batch(transcripts)

        parsed_list = [parsed for parsed, _ in results]
        validations = [validation for _, validation in results]

        if output_file.suffix.lower() == '.xlsx':
            exporter = ExcelExporter(output_file, currency_code=currency)
            exporter.export_expenses(parsed_list, include_summary=summary, validations=validations)
        else:
            export_json(parsed_list, validations, output_file)

        click.echo("\n" + "=" * 50)
        click.echo("PROCESSING SUMMARY")
        click.echo("=" * 50)
        click.echo(f"Transcripts parsed: {processor.stats['total']}")
        click.echo(f"With amount: {processor.stats['with_amount']}")
        click.echo(f"With date: {processor.stats['with_date']}")
        click.echo(f"Uncategorized: {processor.stats['uncategorized']}")
        click.echo(f"Items needing review: {processor.stats['review_items']}")
        click.echo(f"Output: {output_file}")

        review_summary = processor.review_queue.get_summary()
        if review_summary['total']:
            click.echo(f"\n{review_summary['total']} items need manual review:")
            for reason, count in sorted(review_summary['reason_breakdown'].items()):
                click.echo(f"  - {reason}: {count}")

    except Exception as e:
        logger.error(f"Processing failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == '__main__':
    cli()
