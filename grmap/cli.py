"""
Command-line interface for GRmap.

Author: Abhinav Mishra
"""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import ANNOTATION_OUTPUT, MATCH_OUTPUT, GRmapConfig, config_template
from .models import DEFAULT_CHROMOSOME
from .utils.sequence import DEFAULT_CONTEXT_SIZE


def _setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """GRmap: locate marker sequences in a reference and annotate the hits."""
    _setup_logging(verbose)


@cli.command()
@click.argument('reads', type=click.Path(exists=True))
@click.argument('reference', type=click.Path(exists=True))
@click.option('--max-markers', '-n', type=int, default=0,
              help='Number of markers to load (default: 0 = all)')
@click.option('--output', '-o', type=click.Path(), default=MATCH_OUTPUT,
              help=f'Output TSV file (default: {MATCH_OUTPUT})')
@click.option('--threads', '-t', type=int, default=0,
              help='Number of worker processes (default: 0 = one per CPU)')
@click.option('--context', '-c', 'context_size', type=int, default=DEFAULT_CONTEXT_SIZE,
              help=f'Flanking bases to report (default: {DEFAULT_CONTEXT_SIZE})')
@click.option('--chromosome', type=str, default=None,
              help='Chromosome name for matches (default: from FASTA header)')
@click.option('--uppercase/--no-uppercase', default=False,
              help='Upper-case the reference before matching')
def match(reads, reference, max_markers, output, threads, context_size, chromosome, uppercase):
    """
    Find every occurrence of each marker (and its reverse complement).

    \b
    Example:
      grmap match illumina_reads_100.fasta.gz chr1.fasta.gz -n 1000 -o matchedseqs.txt
    """
    from .core.matcher import Matcher
    from .io.fasta import read_fasta, read_markers
    from .io.output import write_matches_tsv

    try:
        header_chrom, ref_seq = read_fasta(reference, uppercase=uppercase)
        if not ref_seq:
            raise ValueError(f"Reference genome is empty: {reference}")

        markers = read_markers(reads, max_markers)
        if not markers:
            raise ValueError(f"No marker sequences found in {reads}")

        chrom = chromosome or header_chrom
        if chrom is None:
            click.echo(f"Warning: no chromosome name in {reference} header; using "
                       f"{DEFAULT_CHROMOSOME} (use --chromosome to override)", err=True)
            chrom = DEFAULT_CHROMOSOME
        matcher = Matcher(ref_seq, n_workers=threads or None,
                          context_size=context_size, chromosome=chrom)
        matches = matcher.run(markers)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    write_matches_tsv(matches, Path(output), run_info={
        'ReferenceFile': reference,
        'QueryFile': reads,
        'Chromosome': chrom,
        'Total Queries Processed': len(markers),
        'Query Option (number of queries)': max_markers,
        'Number of Workers Used': matcher.n_workers,
    })

    click.echo(f"Found {len(matches)} matches for {len({m.marker_id for m in matches})} marker(s)")
    click.echo(f"Results written to: {output}")


@cli.command()
@click.argument('matches', type=click.Path(exists=True))
@click.option('--gff', type=click.Path(exists=True), help='GFF3 gene annotation (.gz ok)')
@click.option('--tss', type=click.Path(exists=True), help='TSS table with header row (.gz ok)')
@click.option('--cpg', type=click.Path(exists=True), help='UCSC cpgIslandExt table (.gz ok)')
@click.option('--repeats', type=click.Path(exists=True), help='RepeatMasker table (.gz ok)')
@click.option('--output', '-o', type=click.Path(), default=ANNOTATION_OUTPUT,
              help=f'Output TSV file (default: {ANNOTATION_OUTPUT})')
@click.option('--threads', '-t', type=int, default=0,
              help='Number of worker processes (default: 0 = one per CPU)')
@click.option('--chromosome', type=str, default=None,
              help='Chromosome of the matched reference (default: the match file\'s '
                   f'"# Chromosome:" line, else {DEFAULT_CHROMOSOME})')
def annotate(matches, gff, tss, cpg, repeats, output, threads, chromosome):
    """
    Annotate a match table with genes, TSSs, CpG islands and repeats.

    \b
    Example:
      grmap annotate matchedseqs.txt --gff genes.gff3.gz --tss tss.txt.gz \\
                     --cpg cpgIslandExt.txt.gz --repeats rmsk.txt.gz
    """
    from .core.annotator import Annotator
    from .io.features import load_feature_set
    from .io.output import read_matches_tsv, write_annotations_tsv

    if not any([gff, tss, cpg, repeats]):
        click.echo("Error: at least one of --gff, --tss, --cpg, --repeats is required", err=True)
        sys.exit(1)

    try:
        match_records = read_matches_tsv(matches, chromosome=chromosome)
        features = load_feature_set(gff=gff, tss=tss, cpg=cpg, repeats=repeats)
    except (ValueError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    annotated = Annotator(features, n_workers=threads or None).run(match_records)
    write_annotations_tsv(annotated, Path(output))

    click.echo(f"Annotated {len(annotated)} matches")
    click.echo(f"Results written to: {output}")


@cli.command()
@click.argument('reads', type=click.Path(exists=True))
@click.argument('reference', type=click.Path(exists=True))
@click.option('--max-markers', '-n', type=int, default=0,
              help='Number of markers to load (default: 0 = all)')
@click.option('--output', '-o', type=click.Path(), required=True,
              help='Output file listing matched marker sequences')
@click.option('--threads', '-t', type=int, default=0,
              help='Number of worker processes (default: 0 = one per CPU)')
def screen(reads, reference, max_markers, output, threads):
    """List markers that occur at least once in the reference (forward strand)."""
    from .core.matcher import screen_markers
    from .io.fasta import read_fasta, read_markers

    try:
        _, ref_seq = read_fasta(reference)
        if not ref_seq:
            raise ValueError(f"Reference genome is empty: {reference}")
        markers = read_markers(reads, max_markers)
        found = screen_markers(markers, ref_seq, n_workers=threads or None)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    with open(output, 'w') as f:
        for marker in found:
            f.write(f"{marker.sequence}\n")

    click.echo(f"{len(found)} marker(s) matched at least once")
    click.echo(f"See '{output}' for the matched markers.")


@cli.command()
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True), required=True,
              help='YAML configuration file (see `grmap init`)')
def run(config_path):
    """Run matching and annotation from a configuration file."""
    from .pipeline import GRmapPipeline

    try:
        config = GRmapConfig.from_yaml(Path(config_path))
        result = GRmapPipeline(config).run()
    except (ValueError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo("\nPipeline complete!")
    click.echo(f"Markers loaded: {result.markers_loaded}")
    click.echo(f"Markers matched: {result.markers_matched}")
    click.echo(f"Matches: {len(result.matches)} -> {result.match_file}")
    if result.annotation_file:
        click.echo(f"Annotations: {len(result.annotated)} -> {result.annotation_file}")


@cli.command()
@click.option('--output', '-o', type=click.Path(), default='grmap_config.yaml',
              help='Output config file path')
def init(output):
    """Generate a template configuration file."""
    with open(output, 'w') as f:
        f.write(config_template())

    click.echo(f"Generated configuration template: {output}")
    click.echo("\nEdit this file and run:")
    click.echo(f"  grmap run --config {output}")


def main():
    cli()


if __name__ == '__main__':
    main()
