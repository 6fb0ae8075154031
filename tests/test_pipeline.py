"""End-to-end tests for the GRmap pipeline and CLI."""

import pandas as pd
import pytest
import yaml
from click.testing import CliRunner
from grmap.cli import cli
from grmap.config import GRmapConfig
from grmap.pipeline import GRmapPipeline


REFERENCE = "TTGGGTAAACCCTTACGTAAAA"


@pytest.fixture
def workspace(tmp_path):
    """Reads, reference and feature files for a small chr1 run."""
    (tmp_path / "ref.fasta").write_text(f">1 test chromosome\n{REFERENCE[:11]}\n{REFERENCE[11:]}\n")
    (tmp_path / "reads.fasta").write_text(">m1\nGGGT\n>m2\nCCCC\n>m3\nACGT\n")
    (tmp_path / "genes.gff3").write_text(
        "##gff-version 3\n"
        "1\tensembl\tgene\t1\t6\t.\t+\t.\tID=gene:G1;Name=GENE1;biotype=protein_coding\n"
    )
    (tmp_path / "tss.txt").write_text(
        "gene_id\ttranscript_id\ttss\tend\tchrom\ttype\tsynonym\n"
        "ENSG1\tENST1\t1\t6\t1\tprotein_coding\tGENE1\n"
    )
    (tmp_path / "cpg.txt").write_text("1\tchr1\t12\t20\tCpG: 2\t9\t2\t5\t44.4\t55.6\t1.2\n")
    (tmp_path / "rmsk.txt").write_text("chr1\t7\t12\t(AC)n\tSimple_repeat\tC\n")
    return tmp_path


def make_config(workspace, **kwargs):
    return GRmapConfig(
        reads=workspace / "reads.fasta",
        reference=workspace / "ref.fasta",
        output_dir=workspace / "results",
        threads=1,
        **kwargs,
    )


class TestGRmapPipeline:
    """Test GRmapPipeline class."""

    def test_match_only(self, workspace):
        """Test a run without feature files writes only the match table."""
        result = GRmapPipeline(make_config(workspace)).run()

        assert result.markers_loaded == 3
        assert result.markers_matched == 2
        assert result.annotation_file is None
        assert result.match_file.exists()
        assert [(m.marker_id, m.start, m.strand.value) for m in result.matches] == [
            ("m1", 2, "F"), ("m1", 8, "R"), ("m3", 14, "F"),
        ]
        assert {m.chromosome for m in result.matches} == {"chr1"}

    def test_match_and_annotate(self, workspace):
        """Test feature files trigger the annotation stage."""
        config = make_config(
            workspace,
            gff=workspace / "genes.gff3",
            tss=workspace / "tss.txt",
            cpg=workspace / "cpg.txt",
            repeats=workspace / "rmsk.txt",
        )
        result = GRmapPipeline(config).run()

        assert result.annotation_file == config.annotation_output
        df = pd.read_csv(result.annotation_file, sep='\t', dtype=str, keep_default_na=False)
        assert len(df) == 3

        forward, reverse, acgt = df.to_dict('records')
        assert forward['GFF_Gene'] == "gene:G1"
        assert forward['TSS_Distance'] == "1"
        assert forward['Repeat_Name'] == "No"
        assert reverse['GFF_Gene'] == "None"
        assert reverse['Repeat_Name'] == "(AC)n"
        assert reverse['Repeat_Length'] == "5"
        assert acgt['InCpG'] == "Yes"
        assert acgt['CpG_GC_Content'] == "55.6"

    def test_annotate_disabled(self, workspace):
        config = make_config(workspace, gff=workspace / "genes.gff3", annotate=False)
        assert GRmapPipeline(config).run().annotated is None

    def test_chromosome_override(self, workspace):
        result = GRmapPipeline(make_config(workspace, chromosome="chr9")).run()
        assert {m.chromosome for m in result.matches} == {"chr9"}

    def test_assembly_header_annotates_on_default_chromosome(self, workspace):
        """Test a header that is not a chromosome name falls back to chr1 and still annotates."""
        (workspace / "ref.fasta").write_text(f">hg38_partial\n{REFERENCE}\n")
        (workspace / "cpg.txt").write_text("1\tchr1\t0\t21\tCpG: 4\t22\t4\t10\t36.4\t45.5\t1.1\n")

        result = GRmapPipeline(make_config(workspace, cpg=workspace / "cpg.txt")).run()

        assert [(a.chromosome, a.in_cpg) for a in result.annotated] == [("chr1", True)] * 3

    def test_one_step_and_two_step_agree(self, workspace):
        """Test `run` and `match` + `annotate` give the same annotation table."""
        (workspace / "ref.fasta").write_text(f">hg38_partial\n{REFERENCE}\n")
        config = make_config(workspace, cpg=workspace / "cpg.txt", repeats=workspace / "rmsk.txt")
        GRmapPipeline(config).run()

        runner = CliRunner()
        matches = workspace / "matches.txt"
        annotated = workspace / "annotated.txt"
        runner.invoke(cli, ['match', str(workspace / "reads.fasta"), str(workspace / "ref.fasta"),
                            '-o', str(matches), '-t', '1'])
        runner.invoke(cli, ['annotate', str(matches), '--cpg', str(workspace / "cpg.txt"),
                            '--repeats', str(workspace / "rmsk.txt"), '-o', str(annotated), '-t', '1'])

        assert annotated.read_text() == config.annotation_output.read_text()

    def test_invalid_config(self, workspace):
        config = GRmapConfig(reads=workspace / "absent.fasta", reference=workspace / "ref.fasta")
        with pytest.raises(ValueError, match="Reads file not found"):
            GRmapPipeline(config).run()

    def test_empty_reference(self, workspace):
        (workspace / "ref.fasta").write_text(">1\n")
        with pytest.raises(ValueError, match="empty"):
            GRmapPipeline(make_config(workspace)).run()


class TestCLI:
    """Test the command-line interface."""

    def test_match_command(self, workspace):
        runner = CliRunner()
        output = workspace / "matches.txt"
        result = runner.invoke(cli, [
            'match', str(workspace / "reads.fasta"), str(workspace / "ref.fasta"),
            '-o', str(output), '-t', '1', '-c', '3',
        ])

        assert result.exit_code == 0, result.output
        assert "Found 3 matches for 2 marker(s)" in result.output
        lines = output.read_text().splitlines()
        assert lines[0].startswith("# ReferenceFile:")
        assert "Number of Workers Used: 1" in output.read_text()

    def test_match_then_annotate(self, workspace):
        runner = CliRunner()
        matches = workspace / "matches.txt"
        annotated = workspace / "annotated.txt"
        runner.invoke(cli, ['match', str(workspace / "reads.fasta"), str(workspace / "ref.fasta"),
                            '-o', str(matches), '-t', '1'])

        result = runner.invoke(cli, [
            'annotate', str(matches), '--gff', str(workspace / "genes.gff3"),
            '-o', str(annotated), '-t', '1',
        ])

        assert result.exit_code == 0, result.output
        df = pd.read_csv(annotated, sep='\t', dtype=str, keep_default_na=False)
        assert list(df['GFF_Gene']) == ["gene:G1", "None", "None"]
        assert set(df['Chromosome']) == {"chr1"}

    def test_annotate_uses_match_file_chromosome(self, workspace):
        """Test annotate reads the chromosome recorded by the match stage."""
        runner = CliRunner()
        matches = workspace / "matches.txt"
        annotated = workspace / "annotated.txt"
        runner.invoke(cli, ['match', str(workspace / "reads.fasta"), str(workspace / "ref.fasta"),
                            '-o', str(matches), '-t', '1', '--chromosome', 'chr2'])

        result = runner.invoke(cli, ['annotate', str(matches), '--gff', str(workspace / "genes.gff3"),
                                     '-o', str(annotated), '-t', '1'])

        assert result.exit_code == 0, result.output
        df = pd.read_csv(annotated, sep='\t', dtype=str, keep_default_na=False)
        assert set(df['Chromosome']) == {"chr2"}
        assert set(df['GFF_Gene']) == {"None"}

    def test_match_warns_on_assembly_header(self, workspace):
        (workspace / "ref.fasta").write_text(f">hg38_partial\n{REFERENCE}\n")
        output = workspace / "matches.txt"
        result = CliRunner().invoke(cli, ['match', str(workspace / "reads.fasta"),
                                          str(workspace / "ref.fasta"), '-o', str(output), '-t', '1'])

        assert result.exit_code == 0, result.output
        assert "no chromosome name" in result.output
        assert "# Chromosome: chr1" in output.read_text()

    def test_run_blank_option(self, workspace):
        """Test a blank YAML value falls back to its default."""
        config_path = workspace / "grmap_config.yaml"
        config_path.write_text(
            f"reads: {workspace / 'reads.fasta'}\n"
            f"reference: {workspace / 'ref.fasta'}\n"
            f"output_dir: {workspace / 'results'}\n"
            "threads: 1\n"
            "context_size:\n"
        )
        result = CliRunner().invoke(cli, ['run', '--config', str(config_path)])
        assert result.exit_code == 0, result.output

    def test_run_bad_option_reports_error(self, workspace):
        config_path = workspace / "grmap_config.yaml"
        config_path.write_text(
            f"reads: {workspace / 'reads.fasta'}\n"
            f"reference: {workspace / 'ref.fasta'}\n"
            "threads: many\n"
        )
        result = CliRunner().invoke(cli, ['run', '--config', str(config_path)])
        assert result.exit_code == 1
        assert "Error: Configuration key 'threads' must be an integer" in result.output

    def test_annotate_requires_features(self, workspace):
        matches = workspace / "matches.txt"
        matches.write_text("Start\n")
        result = CliRunner().invoke(cli, ['annotate', str(matches)])
        assert result.exit_code == 1
        assert "at least one of" in result.output

    def test_screen_command(self, workspace):
        output = workspace / "found.txt"
        result = CliRunner().invoke(cli, [
            'screen', str(workspace / "reads.fasta"), str(workspace / "ref.fasta"),
            '-o', str(output), '-t', '1',
        ])

        assert result.exit_code == 0, result.output
        assert output.read_text().splitlines() == ["GGGT", "ACGT"]

    def test_init_and_run(self, workspace):
        runner = CliRunner()
        config_path = workspace / "grmap_config.yaml"
        result = runner.invoke(cli, ['init', '-o', str(config_path)])
        assert result.exit_code == 0
        assert config_path.exists()

        config_path.write_text(yaml.safe_dump({
            'reads': str(workspace / "reads.fasta"),
            'reference': str(workspace / "ref.fasta"),
            'output_dir': str(workspace / "results"),
            'features': {'cpg': str(workspace / "cpg.txt")},
            'threads': 1,
        }))
        result = runner.invoke(cli, ['run', '--config', str(config_path)])

        assert result.exit_code == 0, result.output
        assert "Pipeline complete!" in result.output
        assert (workspace / "results" / "matchedseqs_annotate.txt").exists()

    def test_run_reports_errors(self, workspace):
        config_path = workspace / "bad.yaml"
        config_path.write_text("reference: ref.fasta\n")
        result = CliRunner().invoke(cli, ['run', '--config', str(config_path)])
        assert result.exit_code == 1
        assert "missing required key 'reads'" in result.output


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
