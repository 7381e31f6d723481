"""集成测试。

批量处理、覆盖模式、命令行和 Web 接口的端到端测试。
"""

from io import BytesIO
from pathlib import Path

import pytest
from flask import Flask
from PIL import Image

from py_image_squash import ImageCompressor
from py_image_squash.cli import main
from py_image_squash.core.compression_engine import process_file
from py_image_squash.engine import BatchProcessor, ConcurrentExecutor, OptionsResolver
from py_image_squash.models import BatchReport, CompressionOptions, FileTask, TargetFormat
from py_image_squash.utils.file_helpers import find_image_files
from py_image_squash.utils.naming_helpers import FileNamingStrategy
from py_image_squash.web_server import create_app, run_server


class TestBatchProcessing:
    """批量处理测试"""

    def test_discovery_is_recursive_and_sorted(self, batch_dir: Path):
        files = find_image_files(batch_dir)

        assert [f.name for f in files] == ["broken.png", "icon.bmp", "pattern.png", "photo.jpg"]

    def test_three_valid_one_corrupted(self, batch_dir: Path):
        processor = BatchProcessor(ConcurrentExecutor(max_workers=2))

        report = processor.process_path(batch_dir, CompressionOptions())

        assert report.total_count == 4
        assert report.processed == 3
        assert report.failure_count == 1
        failed = report.get_failed_items()[0]
        assert failed.path.name == "broken.png"
        assert failed.message
        assert "失败" in BatchReport.format_line(failed)

    def test_results_keep_discovery_order(self, batch_dir: Path):
        files = find_image_files(batch_dir)

        report = BatchProcessor(ConcurrentExecutor(max_workers=4)).process_path(
            batch_dir, CompressionOptions()
        )

        assert [r.path for r in report.results] == files

    def test_outputs_written_next_to_sources(self, batch_dir: Path):
        BatchProcessor().process_path(batch_dir, CompressionOptions())

        assert (batch_dir / "c_pattern.png").exists()
        assert (batch_dir / "c_photo.jpg").exists()
        # BMP 默认量化为 PNG，扩展名随之改写
        assert (batch_dir / "nested" / "c_icon.png").exists()

    def test_output_dir_and_conversion_naming(self, batch_dir: Path, tmp_path: Path):
        out_dir = tmp_path / "out"
        report = BatchProcessor(output_dir=out_dir).process_path(
            batch_dir, CompressionOptions(to_webp=True)
        )

        assert report.processed == 3
        assert (out_dir / "c_pattern.webp").exists()
        assert (out_dir / "c_photo.webp").exists()
        assert not (batch_dir / "c_pattern.webp").exists()

    def test_aggregate_counts_successes_only(self, batch_dir: Path):
        report = BatchProcessor().process_path(batch_dir, CompressionOptions())

        successes = report.get_successful_items()
        assert report.total_before == sum(r.size_before for r in successes)
        assert report.total_after == sum(r.size_after for r in successes)

    def test_empty_directory(self, tmp_path: Path):
        report = BatchProcessor().process_path(tmp_path, CompressionOptions())

        assert report.results == []
        assert report.summary_line() == "没有文件被压缩。"

    def test_process_executor(self, batch_dir: Path):
        executor = ConcurrentExecutor(max_workers=2, executor_type="process")
        report = BatchProcessor(executor).process_path(batch_dir, CompressionOptions())
        assert report.processed == 3


class TestOverwrite:
    """覆盖原文件测试"""

    def test_overwrite_replaces_original(self, png_file: Path):
        original_size = png_file.stat().st_size
        report = BatchProcessor(overwrite=True).process_path(png_file, CompressionOptions())

        result = report.results[0]
        assert result.success
        assert result.output_path == png_file
        assert result.size_before == original_size
        assert png_file.stat().st_size == result.size_after
        assert sorted(p.name for p in png_file.parent.iterdir()) == ["single.png"]

    def test_overwrite_with_conversion_rewrites_extension(self, png_file: Path):
        report = BatchProcessor(overwrite=True).process_path(
            png_file, CompressionOptions(to_jpeg=True)
        )

        assert report.processed == 1
        assert sorted(p.name for p in png_file.parent.iterdir()) == ["single.jpg"]

    def test_failed_overwrite_keeps_original(self, tmp_path: Path):
        broken = tmp_path / "broken.png"
        broken.write_bytes(b"garbage")

        report = BatchProcessor(overwrite=True).process_path(broken, CompressionOptions())

        assert report.failure_count == 1
        assert broken.read_bytes() == b"garbage"
        assert not (tmp_path / "broken.png.bak").exists()

    def test_replace_failure_restores_original(
        self, png_file: Path, monkeypatch: pytest.MonkeyPatch
    ):
        original = png_file.read_bytes()

        def fail_replace(self, target):
            raise OSError("disk full")

        monkeypatch.setattr(Path, "replace", fail_replace)
        report = BatchProcessor(overwrite=True).process_path(png_file, CompressionOptions())

        result = report.results[0]
        assert not result.success
        assert result.message == "覆盖失败: disk full"
        assert png_file.read_bytes() == original
        assert sorted(p.name for p in png_file.parent.iterdir()) == ["single.png"]

    def test_same_stem_inputs_do_not_clobber_each_other(self, tmp_path: Path):
        Image.new("RGB", (20, 20), color=(255, 0, 0)).save(tmp_path / "a.png", "PNG")
        Image.new("RGB", (20, 20), color=(0, 0, 255)).save(tmp_path / "a.bmp", "BMP")

        report = BatchProcessor(overwrite=True).process_path(tmp_path, CompressionOptions())

        outcome = {r.path.name: r for r in report.results}
        assert outcome["a.png"].success
        assert not outcome["a.bmp"].success
        assert "a.png" in outcome["a.bmp"].message
        assert (tmp_path / "a.bmp").exists()
        with Image.open(tmp_path / "a.png") as img:
            assert img.convert("RGB").getpixel((0, 0)) == (255, 0, 0)

    def test_heic_and_jpeg_with_same_stem(self, tmp_path: Path):
        Image.new("RGB", (20, 20), color="green").save(tmp_path / "IMG_1.jpg", "JPEG")
        (tmp_path / "IMG_1.heic").write_bytes(b"heic placeholder")

        report = BatchProcessor(overwrite=True).process_path(tmp_path, CompressionOptions())

        outcome = {r.path.name: r for r in report.results}
        assert outcome["IMG_1.jpg"].success
        assert "IMG_1.jpg" in outcome["IMG_1.heic"].message
        assert (tmp_path / "IMG_1.heic").read_bytes() == b"heic placeholder"

    def test_existing_target_outside_batch_is_kept(self, tmp_path: Path):
        source = tmp_path / "logo.bmp"
        Image.new("RGB", (20, 20), color="blue").save(source, "BMP")
        existing = tmp_path / "logo.png"
        existing.write_bytes(b"unrelated file")

        report = BatchProcessor(overwrite=True).process_path(source, CompressionOptions())

        result = report.results[0]
        assert not result.success
        assert "目标文件已存在" in result.message
        assert existing.read_bytes() == b"unrelated file"
        assert source.exists()
        assert not (tmp_path / "c_logo.png").exists()

    def test_shared_output_path_without_overwrite(self, tmp_path: Path):
        Image.new("RGB", (20, 20), color="red").save(tmp_path / "a.png", "PNG")
        Image.new("RGB", (20, 20), color="blue").save(tmp_path / "a.bmp", "BMP")

        report = BatchProcessor().process_path(tmp_path, CompressionOptions())

        outcome = {r.path.name: r for r in report.results}
        assert outcome["a.png"].success
        assert not outcome["a.bmp"].success
        assert "c_a.png" in outcome["a.bmp"].message
        with Image.open(tmp_path / "c_a.png") as img:
            assert img.convert("RGB").getpixel((0, 0)) == (255, 0, 0)

    def test_read_failure_message_has_single_prefix(self, tmp_path: Path):
        task = FileTask(path=tmp_path / "missing.png", options=CompressionOptions())

        result = process_file(task)

        assert not result.success
        assert result.message.startswith("读取失败: ")
        assert result.message.count("读取失败") == 1


class TestImageCompressor:
    """库接口测试"""

    def test_compress_bytes_with_fields(self, solid_png_bytes: bytes):
        result = ImageCompressor(max_workers=1).compress_bytes(
            solid_png_bytes, "png", to_bmp=True, unknown_flag=True
        )
        assert result.content_type == "image/bmp"

    def test_compress_file(self, png_file: Path, tmp_path: Path):
        result = ImageCompressor(max_workers=1).compress_file(png_file, output_dir=tmp_path / "o")
        assert result.success
        assert result.output_path == tmp_path / "o" / "c_single.png"


class TestOptionsResolver:
    """选项解析测试"""

    def test_form_defaults(self):
        options = OptionsResolver.from_form({})

        assert options.png_quality == "50-80"
        assert options.png_lossy is True
        assert options.oxipng is True
        assert options.target_format is None

    def test_form_values(self):
        options = OptionsResolver.from_form(
            {"output_format": "avif", "png_lossy": "false", "oxipng": "yes", "png_quality": "30-40"}
        )

        assert options.target_format is TargetFormat.AVIF
        assert options.png_lossy is False
        assert options.oxipng is False
        assert options.lossy_quality == 35

    def test_unknown_output_format_ignored(self):
        assert OptionsResolver.from_form({"output_format": "gif"}).target_format is None

    def test_build_drops_unknown_keys(self):
        options = OptionsResolver.build(to_tiff=True, resize=True)
        assert options.target_format is TargetFormat.TIFF


class TestCommandLine:
    """命令行测试"""

    def test_batch_output(self, batch_dir: Path, capsys: pytest.CaptureFixture[str]):
        exit_code = main([str(batch_dir), "-j", "2", "--no-oxipng"])

        captured = capsys.readouterr()
        assert exit_code == 0
        assert "pattern.png:" in captured.out
        assert "共处理 3 个文件，失败 1 个" in captured.out
        assert "broken.png: 失败" in captured.err

    def test_conversion_flag(self, png_file: Path, tmp_path: Path):
        out_dir = tmp_path / "converted"
        assert main([str(png_file), "--to-tiff", "-o", str(out_dir)]) == 0
        assert (out_dir / "c_single.tiff").exists()

    def test_missing_input(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]):
        exit_code = main([str(tmp_path / "missing")])

        assert exit_code == 1
        assert "文件不存在" in capsys.readouterr().err

    def test_no_supported_files(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]):
        (tmp_path / "readme.txt").write_text("hello")

        assert main([str(tmp_path)]) == 0
        assert "未找到支持的图像文件" in capsys.readouterr().err

    def test_no_input_starts_server(self, monkeypatch: pytest.MonkeyPatch):
        calls = []
        monkeypatch.setattr(
            "py_image_squash.web_server.run_server",
            lambda **kwargs: calls.append(kwargs),
        )

        assert main(["--port", "4040", "--no-browser"]) == 0
        assert calls == [{"port": 4040, "open_browser": False}]

    def test_bind_failure(self, monkeypatch: pytest.MonkeyPatch):
        def fail(**kwargs):
            raise OSError("Address already in use")

        monkeypatch.setattr("py_image_squash.web_server.run_server", fail)

        assert main(["--web"]) == 1

    def test_port_zero_is_passed_through(self, monkeypatch: pytest.MonkeyPatch):
        calls = []
        monkeypatch.setattr(
            "py_image_squash.web_server.run_server",
            lambda **kwargs: calls.append(kwargs),
        )

        assert main(["--web", "--port", "0", "--no-browser"]) == 0
        assert calls[0]["port"] == 0

    @pytest.mark.parametrize("port", ["70000", "-1", "http"])
    def test_invalid_port_rejected(self, port: str, capsys: pytest.CaptureFixture[str]):
        with pytest.raises(SystemExit) as exc_info:
            main(["--web", "--port", port])

        assert exc_info.value.code == 2
        assert "--port" in capsys.readouterr().err

    def test_all_failed_summary_on_stderr(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ):
        (tmp_path / "broken.png").write_bytes(b"")

        assert main([str(tmp_path)]) == 0

        captured = capsys.readouterr()
        assert "没有文件被压缩。" in captured.err
        assert "没有文件被压缩。" not in captured.out


class TestWebServer:
    """Web 接口测试"""

    @pytest.fixture
    def client(self):
        app = create_app(max_upload_bytes=1024 * 1024)
        app.config["TESTING"] = True
        return app.test_client()

    def test_index_page(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert b"/api/compress" in resp.data
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    def test_compress_with_conversion(self, client, solid_png_bytes: bytes):
        resp = client.post(
            "/api/compress",
            data={"file": (BytesIO(solid_png_bytes), "photo.png"), "output_format": "webp"},
            content_type="multipart/form-data",
        )

        assert resp.status_code == 200
        assert resp.headers["Content-Type"] == "image/webp"
        assert "attachment" in resp.headers["Content-Disposition"]
        assert "photo.webp" in resp.headers["Content-Disposition"]
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        with Image.open(BytesIO(resp.data)) as img:
            assert img.format == "WEBP"

    def test_compress_without_conversion_adds_prefix(self, client, solid_png_bytes: bytes):
        resp = client.post(
            "/api/compress",
            data={"file": (BytesIO(solid_png_bytes), "photo.png")},
            content_type="multipart/form-data",
        )

        assert resp.status_code == 200
        assert resp.headers["Content-Type"] == "image/png"
        assert "c_photo.png" in resp.headers["Content-Disposition"]

    def test_missing_file_field(self, client):
        resp = client.post("/api/compress", data={"png_quality": "50-80"})
        assert resp.status_code == 400

    def test_empty_file(self, client):
        resp = client.post(
            "/api/compress",
            data={"file": (BytesIO(b""), "empty.png")},
            content_type="multipart/form-data",
        )
        assert resp.status_code == 400

    def test_corrupted_file(self, client):
        resp = client.post(
            "/api/compress",
            data={"file": (BytesIO(b"definitely not an image"), "bad.png")},
            content_type="multipart/form-data",
        )
        assert resp.status_code == 500
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    def test_oversize_body(self, client):
        resp = client.post(
            "/api/compress",
            data={"file": (BytesIO(b"x" * (2 * 1024 * 1024)), "big.png")},
            content_type="multipart/form-data",
        )
        assert resp.status_code == 413

    def test_preflight_has_cors_headers(self, client):
        resp = client.options("/api/compress")
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        assert "POST" in resp.headers["Access-Control-Allow-Methods"]

    def test_run_server_keeps_port_zero(self, monkeypatch: pytest.MonkeyPatch):
        calls = []
        monkeypatch.setattr(Flask, "run", lambda self, **kwargs: calls.append(kwargs))

        run_server(port=0, open_browser=False)

        assert calls[0]["port"] == 0


class TestNaming:
    """下载文件名测试"""

    @pytest.mark.parametrize(
        ("filename", "produced", "expected"),
        [
            ("photo.png", TargetFormat.WEBP, "photo.webp"),
            ("photo.png", TargetFormat.PNG, "c_photo.png"),
            ("photo.jpeg", TargetFormat.JPEG, "c_photo.jpeg"),
            ("photo.heic", TargetFormat.JPEG, "photo.jpg"),
            ("scan.tif", TargetFormat.TIFF, "c_scan.tif"),
        ],
    )
    def test_download_name(self, filename: str, produced: TargetFormat, expected: str):
        assert FileNamingStrategy.download_name(filename, produced) == expected
