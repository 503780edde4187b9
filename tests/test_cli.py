from countog import build_parser, config_from_args, main


def test_defaults():
    config = config_from_args(build_parser().parse_args(["in.fa"]))
    assert config.oligo == 8
    assert config.size_data == 20000
    assert config.size_counting == 100000
    assert config.size_shift == 20000
    assert config.size_genome == 4294967296
    assert config.min_qscore == 16
    assert not config.reduce
    assert not config.header
    assert config.label is None


def test_short_flags():
    args = build_parser().parse_args(
        ["-d", "-r", "-l", "mouse", "-o", "6", "-t", "100", "-c", "500", "-s", "10",
         "-g", "1000", "-q", "20", "in.fa"]
    )
    config = config_from_args(args)
    assert (config.oligo, config.size_data, config.size_counting) == (6, 100, 500)
    assert (config.size_shift, config.size_genome, config.min_qscore) == (10, 1000, 20)
    assert config.reduce and config.header
    assert config.label == "mouse"


def test_main_writes_rows(tmp_path):
    fasta = tmp_path / "in.fa"
    fasta.write_bytes(b">seq1\nACGTACGTTTGA\n")
    out = tmp_path / "out.tsv"

    status = main([str(fasta), "--output", str(out), "-o", "2", "-t", "3", "-c", "20", "-d"])

    assert status == 0
    lines = out.read_text().splitlines()
    assert len(lines) == 4
    assert lines[0].split("\t")[0] == "TT"
    assert all(len(line.split("\t")) == 16 for line in lines)


def test_main_exit_codes(tmp_path):
    assert main([str(tmp_path / "missing.fa")]) == 2

    bad = tmp_path / "bad.txt"
    bad.write_bytes(b"ACGT\n")
    assert main([str(bad)]) == 3

    truncated = tmp_path / "bad.fq"
    truncated.write_bytes(b"@r1\nACGT\n+\n")
    assert main([str(truncated)]) == 4

    mismatch = tmp_path / "mismatch.fq"
    mismatch.write_bytes(b"@r1\nACGT\n+\nII\n")
    assert main([str(mismatch)]) == 5

    assert main([str(bad), "-o", "0"]) == 1
