"""
AI README MCP Server

向 AI 编程工具（Claude Code、Gemini CLI 等）暴露仓库内分散的 AI_README.md：
按变更路径聚合相关指引，并按 section 幂等地更新文档。

使用方式:
  stdio 模式（本地 Claude Code）:
    python -m ai_readme.mcp_server --transport stdio

  HTTP 模式（远程 Agent）:
    python -m ai_readme.mcp_server --transport http --port 8808

Claude Code 配置示例:
  claude mcp add ai-readme -- python -m ai_readme.mcp_server --transport stdio
"""

import logging
import signal
import sys
from typing import Optional

# MCP
from mcp.server.fastmcp import FastMCP

# App
from ai_readme.config import settings
from ai_readme.core.errors import AiReadmeError
from ai_readme.core.logging_config import LOGGER_NAME, configure_logging
from ai_readme.schemas.guidance import GuidanceResponse, UpdateResponse
from ai_readme.schemas.validation import validate_guidance_request, validate_update_request
from ai_readme.services.guidance import handle_guidance, handle_update

logger = logging.getLogger(__name__)

# 传递给编排层的应用 logger，main() 中替换为 configure_logging() 的返回值
app_logger: logging.Logger = logging.getLogger(LOGGER_NAME)

mcp = FastMCP("ai-readme-mcp")


def _error(tool: str, message: str, fields: Optional[list] = None) -> dict:
    payload = {"error": message, "tool": tool}
    if fields is not None:
        payload["fields"] = fields
    return payload


def format_guidance_report(response: GuidanceResponse) -> str:
    """生成面向人类阅读的指引报告（Markdown）"""
    header: list[str] = []
    if response.scopes:
        header.append("### Matched AI_README scopes")
        header.extend(
            f"{i}. `{scope.directory}` → {scope.absolute_path}"
            for i, scope in enumerate(response.scopes, start=1)
        )
    else:
        header.append("No AI_README files discovered for the requested repository.")

    if response.missing_paths:
        header.extend(["", "### Paths without scoped AI_README coverage"])
        header.extend(f"- {missing}" for missing in response.missing_paths)

    aggregated = response.aggregated_guidance.strip() or (
        "No AI_README guidance available. Consider creating AI_README.md files in the repository."
    )
    return "\n".join(["\n".join(header), "", aggregated])


def format_update_report(result: UpdateResponse) -> str:
    return "\n".join([
        f"File: {result.file_path}",
        f"Status: {'created' if result.created else 'updated'}",
        f"Sections updated: {', '.join(result.updated_sections) or 'none'}",
        f"Changelog appended: {'yes' if result.changelog_appended else 'no'}",
    ])


# ---------------------------------------------------------------------------
# Tool 1: collect_ai_readme_guidance
# ---------------------------------------------------------------------------

@mcp.tool()
async def collect_ai_readme_guidance(
    changed_paths: list[str] | None = None,
    repository_root: str | None = None,
    raw: bool = False,
) -> dict:
    """
    收集与变更路径相关的 AI_README.md 指引。

    参数:
      changed_paths:   变更文件路径列表（绝对路径或相对仓库根目录）；留空返回所有 scope
      repository_root: 仓库根目录（可选，默认使用服务配置或工作目录）
      raw:             为 true 时返回原始 Markdown 拼接，否则返回带说明的格式化文本

    返回命中的 scope 摘要、聚合指引文本、未被任何 scope 覆盖的路径，以及可读报告 report。
    """
    tool = "collect_ai_readme_guidance"
    try:
        validation = validate_guidance_request({
            "changed_paths": changed_paths or [],
            "repository_root": repository_root,
            "raw": raw,
        })
        if not validation.ok:
            return _error(tool, validation.describe(), [e.__dict__ for e in validation.errors])

        request = validation.value
        logger.info(f"[MCP] 收集 AI_README 指引，变更路径数: {len(request.changed_paths)}")
        response = await handle_guidance(request, log=app_logger)

        return {**response.model_dump(), "report": format_guidance_report(response)}
    except AiReadmeError as e:
        logger.warning(f"[{tool}] {e}")
        return _error(tool, str(e))
    except Exception as e:
        logger.error(f"[{tool}] root={repository_root}, 错误: {e}")
        return _error(tool, str(e))


# ---------------------------------------------------------------------------
# Tool 2: update_ai_readme_section
# ---------------------------------------------------------------------------

@mcp.tool()
async def update_ai_readme_section(
    target_dir: str,
    section: str,
    body: str,
    headline: str | None = None,
    change_summary: str | None = None,
    require_existing: bool = False,
) -> dict:
    """
    在指定目录的 AI_README.md 中插入或替换一个二级 section，文件不存在时自动创建。

    参数:
      target_dir:       AI_README.md 所在目录
      section:          二级标题（大小写不敏感匹配已有 section）
      body:             section 的 Markdown 正文
      headline:         一级标题（可选，仅在文档缺少一级标题时使用）
      change_summary:   变更摘要（可选），写入 Changelog section
      require_existing: 为 true 时文件必须已存在

    返回是否新建、更新的 section、是否写入 Changelog、文件路径，以及可读报告 report。
    """
    tool = "update_ai_readme_section"
    try:
        validation = validate_update_request({
            "target_dir": target_dir,
            "section": section,
            "body": body,
            "headline": headline,
            "change_summary": change_summary,
            "require_existing": require_existing,
        })
        if not validation.ok:
            return _error(tool, validation.describe(), [e.__dict__ for e in validation.errors])

        request = validation.value
        logger.info(f"[MCP] 更新 AI_README: {request.target_dir} (section: {request.section})")
        result = await handle_update(request, log=app_logger)

        return {**result.model_dump(), "report": format_update_report(result)}
    except AiReadmeError as e:
        logger.warning(f"[{tool}] {e}")
        return _error(tool, str(e))
    except Exception as e:
        logger.error(f"[{tool}] dir={target_dir}, 错误: {e}")
        return _error(tool, str(e))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def _install_signal_handlers() -> None:
    """SIGINT/SIGTERM：记录日志后立即退出（写入均为整文件写，不会留下半截文件）"""
    def _shutdown(signum, _frame):
        logger.warning(f"[MCP] 收到 {signal.Signals(signum).name}，正在关闭 MCP Server")
        sys.exit(0)

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)


def build_http_app(auth_token: Optional[str] = None):
    """构建 streamable-http 传输的 Starlette 应用，配置 token 时启用 Bearer 鉴权"""
    from starlette.middleware.base import BaseHTTPMiddleware
    from starlette.requests import Request
    from starlette.responses import JSONResponse

    class BearerAuthMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next):
            auth = request.headers.get("Authorization", "")
            if not auth.startswith("Bearer ") or auth[7:] != auth_token:
                return JSONResponse({"error": "Unauthorized"}, status_code=401)
            return await call_next(request)

    starlette_app = mcp.streamable_http_app()
    if auth_token:
        starlette_app.add_middleware(BearerAuthMiddleware)
    return starlette_app


def main() -> None:
    import argparse

    global app_logger

    parser = argparse.ArgumentParser(description="AI README MCP Server")
    parser.add_argument("--transport", choices=["stdio", "http"], default="stdio")
    parser.add_argument("--port", type=int, default=8808)
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--log-level", default=None, help="覆盖 AI_README_MCP_LOG_LEVEL")
    args = parser.parse_args()

    app_logger = configure_logging(args.log_level)
    _install_signal_handlers()

    if args.transport == "stdio":
        logger.info("[MCP] AI README MCP Server 已启动 (stdio)")
        mcp.run(transport="stdio")
    else:
        import uvicorn

        starlette_app = build_http_app(settings.MCP_AUTH_TOKEN)
        logger.info(f"[MCP] 启动 HTTP 模式，监听 {args.host}:{args.port}")
        uvicorn.run(starlette_app, host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
