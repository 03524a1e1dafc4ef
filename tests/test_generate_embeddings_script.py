"""Tests for the embedding generation CLI."""

from scripts.generate_embeddings import build_parser, main


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.limit is None
    assert args.force_regenerate is False
    assert args.mock is False


def test_generates_with_mock_provider(seeded_repo, capsys):
    code = main(["--db", seeded_repo.db_path, "--mock", "--interval", "0"])

    assert code == 0
    out = capsys.readouterr().out
    assert "Processed 1 wines successfully" in out
    assert seeded_repo.get_wine(seeded_repo.ids["cab"]).has_embedding


def test_second_run_has_nothing_to_do(seeded_repo, capsys):
    main(["--db", seeded_repo.db_path, "--mock", "--interval", "0"])
    capsys.readouterr()

    code = main(["--db", seeded_repo.db_path, "--mock", "--interval", "0"])
    assert code == 0
    assert "No wines to process" in capsys.readouterr().out
