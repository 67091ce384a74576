import pytest

import codec
import driver
import huffman as huff


def test_roundtrip_text_file(tmp_path, capsys):
    src = tmp_path / "hello.txt"
    src.write_text("hello\nhello world\n", encoding="utf-8")
    assert driver.main([str(src), "--outdir", str(tmp_path / "out")]) == 0

    compressed, decompressed = driver.output_paths(src, tmp_path / "out")
    assert compressed.name == "hello_compressed.bin"
    assert decompressed.read_bytes() == src.read_bytes()
    out = capsys.readouterr().out
    assert "Codes:" in out
    assert "Compression ratio" in out


def test_roundtrip_binary_file_quietly(tmp_path, capsys):
    src = tmp_path / "blob.dat"
    src.write_bytes(bytes(range(256)) * 4)
    assert driver.main([str(src), "--binary", "--quiet"]) == 0
    assert (tmp_path / "blob_decompressed.dat").read_bytes() == src.read_bytes()
    assert capsys.readouterr().out == ""


@pytest.mark.parametrize("content", [b"", b"AAAA"])
def test_empty_and_single_symbol_files(tmp_path, content):
    src = tmp_path / "edge.txt"
    src.write_bytes(content)
    assert driver.main([str(src), "--quiet"]) == 0
    assert (tmp_path / "edge_decompressed.txt").read_bytes() == content


def test_missing_input_is_io_error(tmp_path, capsys):
    assert driver.main([str(tmp_path / "nope.txt")]) == driver.EXIT_IO_ERROR
    assert "Failed to read" in capsys.readouterr().err


def test_undecodable_text_is_io_error(tmp_path):
    src = tmp_path / "latin1.txt"
    src.write_bytes(b"caf\xe9")
    assert driver.main([str(src), "--quiet"]) == driver.EXIT_IO_ERROR
    assert driver.main([str(src), "--quiet", "--encoding", "latin-1"]) == 0


def test_truncated_compressed_file_is_format_error(tmp_path, monkeypatch, capsys):
    src = tmp_path / "in.txt"
    src.write_text("This is a test. " * 50, encoding="utf-8")

    def compress_then_truncate(codes, source, sink, **kwargs):
        bits = codec.compress(codes, source, sink, **kwargs)
        sink.write_bytes(sink.read_bytes()[:-3])
        return bits

    monkeypatch.setattr(driver, "compress", compress_then_truncate)
    assert driver.main([str(src), "--quiet"]) == driver.EXIT_FORMAT_ERROR
    assert "Bad compressed file" in capsys.readouterr().err


def test_corrupted_padding_is_format_error(tmp_path, monkeypatch):
    src = tmp_path / "hello.txt"
    src.write_text("hello", encoding="utf-8")

    def compress_then_flip_last_bit(codes, source, sink, **kwargs):
        bits = codec.compress(codes, source, sink, **kwargs)
        data = bytearray(sink.read_bytes())
        data[-1] |= 0x01
        sink.write_bytes(bytes(data))
        return bits

    monkeypatch.setattr(driver, "compress", compress_then_flip_last_bit)
    assert driver.main([str(src), "--quiet"]) == driver.EXIT_FORMAT_ERROR


def test_table_missing_a_symbol_is_unknown_symbol_error(tmp_path, monkeypatch, capsys):
    src = tmp_path / "in.txt"
    src.write_text("abcabcz", encoding="utf-8")
    real_table = huff.build_code_table

    def table_without_z(tree):
        codes = real_table(tree)
        del codes["z"]
        return codes

    monkeypatch.setattr(huff, "build_code_table", table_without_z)
    assert driver.main([str(src), "--quiet"]) == driver.EXIT_UNKNOWN_SYMBOL
    assert "'z'" in capsys.readouterr().err
