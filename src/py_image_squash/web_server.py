"""Web 服务模块。

提供上传页面和单文件压缩接口，所有响应都带有宽松的 CORS 头。
"""

import time
import webbrowser
from io import BytesIO
from pathlib import Path

from flask import Flask, Response, request, send_file
from werkzeug.exceptions import RequestEntityTooLarge

from .config import get_config
from .core.compression_engine import compress_bytes
from .engine.config import OptionsResolver
from .exceptions import CompressionError
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter
from .utils.naming_helpers import FileNamingStrategy, PathResolver


logger = get_logger()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "*",
}


def _text(message: str, status: int) -> Response:
    return Response(message, status=status, mimetype="text/plain")


def create_app(max_upload_bytes: int | None = None) -> Flask:
    """创建 Flask 应用

    Args:
        max_upload_bytes: 请求体上限，None 使用配置默认值

    Returns:
        Flask: 应用实例
    """
    app = Flask(__name__, static_folder="static", static_url_path="/static")
    app.config["MAX_CONTENT_LENGTH"] = (
        max_upload_bytes or get_config().server.max_upload_bytes
    )

    @app.after_request
    def _add_cors_headers(resp: Response) -> Response:
        resp.headers.update(CORS_HEADERS)
        return resp

    @app.errorhandler(RequestEntityTooLarge)
    def _too_large(e):
        logger.warning(f"请求体过大: {request.content_length} 字节")
        return _text("文件过大", 413)

    @app.route("/", methods=["GET"])
    def index():
        return app.send_static_file("index.html")

    @app.route("/api/compress", methods=["POST"])
    def compress():
        upload = request.files.get("file")
        if upload is None:
            return _text("缺少文件字段", 400)

        data = upload.read()
        if not data:
            return _text("文件为空", 400)

        filename = Path(upload.filename or "image").name
        options = OptionsResolver.from_form(request.form)
        started = time.perf_counter()

        try:
            result = compress_bytes(data, PathResolver.extension_of(filename), options)
        except CompressionError as e:
            logger.error(f"压缩失败: {filename} - {e.message}")
            return _text(f"压缩失败: {e.message}", 500)

        logger.info(
            MessageFormatter.compression_stats(
                filename, len(data), result.size, time.perf_counter() - started
            )
        )

        return send_file(
            BytesIO(result.data),
            mimetype=result.content_type,
            as_attachment=True,
            download_name=FileNamingStrategy.download_name(filename, result.format),
        )

    return app


def run_server(
    host: str | None = None, port: int | None = None, open_browser: bool | None = None
) -> None:
    """启动 Web 服务（阻塞）

    Raises:
        OSError: 端口绑定失败
    """
    settings = get_config().server
    host = host if host is not None else settings.HOST
    port = port if port is not None else settings.PORT
    open_browser = settings.OPEN_BROWSER if open_browser is None else open_browser

    app = create_app()
    url = f"http://{host}:{port}"
    logger.info(f"Web 服务已启动: {url}")
    print(f"Web 服务运行在 {url}")

    if open_browser:
        try:
            webbrowser.open(url)
        except webbrowser.Error as e:
            logger.warning(f"无法打开浏览器: {e}")

    app.run(host=host, port=port, debug=False, use_reloader=False)
