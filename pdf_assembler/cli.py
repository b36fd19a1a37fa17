"""
Command-line interface for PDF assembler.
"""

import logging
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeRemainingColumn

from pdf_assembler.exceptions import EmptyResultError, InvalidJobError, PDFAssemblerException
from pdf_assembler.execution import ExecutionContext, JobState
from pdf_assembler.helper import PDFHelper, get_page_count
from pdf_assembler.utils import configure_logging, format_file_size

console = Console()

IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".tif", ".tiff"}


def _progress_bar() -> Progress:
    return Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeRemainingColumn(),
        console=console,
    )


def _fail(message) -> None:
    console.print(f"\n[bold red]✗ Error:[/bold red] {escape(str(message))}")
    sys.exit(1)


@click.group()
@click.version_option(version="1.0.0")
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """
    PDF Assembler CLI - Combine images and PDFs, or split a PDF in two.
    """
    configure_logging(logging.DEBUG if verbose else logging.WARNING)


@cli.command(name="assemble")
@click.argument('inputs', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--output', '-o',
    required=True,
    help='Path of the assembled PDF',
    type=click.Path(dir_okay=False)
)
@click.option(
    '--page-numbers/--no-page-numbers',
    default=False,
    help='Stamp "Page N" at the bottom of every page'
)
@click.option(
    '--image-height',
    default=0,
    help='Drawn height of images in points (0 fills the page)',
    type=click.IntRange(min=0)
)
@click.option(
    '--rotation', '-r',
    default=None,
    help='Rotation code for a single PDF input (1=0, 6=90, 3=180, 8=270)',
    type=int
)
def assemble(inputs, output, page_numbers, image_height, rotation):
    """
    Combine images and PDFs, in argument order, into one PDF.

    Examples:

        pdf-assembler assemble cover.png report.pdf -o out.pdf

        pdf-assembler assemble scan.pdf -r 6 -o rotated.pdf --page-numbers
    """
    try:
        with _progress_bar() as progress:
            task = progress.add_task("Assembling", total=100)

            def update_progress(percent):
                progress.update(task, completed=percent)

            helper = PDFHelper(
                show_page_numbers=page_numbers,
                context=ExecutionContext.INTERACTIVE,
                progress_sink=update_progress,
                save_target=lambda: output,
            )

            if rotation is not None:
                if len(inputs) != 1 or Path(inputs[0]).suffix.lower() != ".pdf":
                    raise InvalidJobError("--rotation requires exactly one PDF input.")
                helper.add_single_document_with_rotation(Path(inputs[0]).read_bytes(), rotation)
            else:
                for input_path in inputs:
                    path = Path(input_path)
                    if path.suffix.lower() in IMAGE_SUFFIXES:
                        helper.add_image(path.read_bytes(), image_height)
                    else:
                        helper.add_document(path.read_bytes())

            written = helper.save()
            helper.flush_progress()

        if helper.last_outcome is not None and helper.last_outcome.state is JobState.EMPTY:
            raise EmptyResultError("Nothing to write: the inputs produced no pages.")

        console.print(f"\n[bold green]✓ Successfully created:[/bold green] {written}")
        console.print(f"[dim]Size: {format_file_size(os.path.getsize(written))}[/dim]")
        console.print()

    except PDFAssemblerException as e:
        _fail(e)
    except OSError as e:
        _fail(e)


@cli.command(name="split")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--start', '-s',
    required=True,
    help='Starting page number (1-indexed)',
    type=int
)
@click.option(
    '--end', '-e',
    required=True,
    help='Ending page number (1-indexed, inclusive)',
    type=int
)
@click.option(
    '--output-dir', '-o',
    default='./output',
    help='Output directory',
    type=click.Path(file_okay=False)
)
def split(input_pdf, start, end, output_dir):
    """
    Cut pages START-END out of a PDF.

    Writes the remaining pages and the extracted pages as two files.

    Example:

        pdf-assembler split input.pdf --start 2 --end 3 -o parts
    """
    try:
        helper = PDFHelper()
        helper.add_document(Path(input_pdf).read_bytes())

        console.print(f"\n[bold cyan]Splitting out pages {start}-{end}...[/bold cyan]")
        result = helper.split(start, end)
        if result is None:
            raise EmptyResultError("Split did not complete.")

        out_dir = Path(output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        stem = Path(input_pdf).stem
        remainder_path = out_dir / f"{stem}_remainder.pdf"
        extracted_path = out_dir / f"{stem}_pages_{start}-{end}.pdf"
        remainder_path.write_bytes(result.remainder)
        extracted_path.write_bytes(result.extracted)

        console.print(
            f"\n[bold green]✓ Remainder ({result.remainder_pages} pages):[/bold green] {remainder_path}"
        )
        console.print(
            f"[bold green]✓ Extracted ({result.extracted_pages} pages):[/bold green] {extracted_path}"
        )
        console.print()

    except PDFAssemblerException as e:
        _fail(e)
    except OSError as e:
        _fail(e)


@cli.command(name="count")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
def count(input_pdf):
    """
    Print the number of pages in a PDF.

    Example:

        pdf-assembler count input.pdf
    """
    try:
        console.print(get_page_count(Path(input_pdf).read_bytes()))
    except PDFAssemblerException as e:
        _fail(e)
    except OSError as e:
        _fail(e)


if __name__ == '__main__':
    cli()
