from typing import Optional, List
from pydantic import BaseModel, Field, field_validator


class GuidanceRequest(BaseModel):
    changed_paths: List[str] = Field(default_factory=list, description="触发请求的文件路径（绝对路径或相对仓库根目录）")
    repository_root: Optional[str] = Field(None, description="仓库根目录覆盖，不填则使用默认根目录")
    raw: bool = Field(False, description="返回原始 Markdown 拼接而非带说明的格式化文本")


class GuidanceScopeSummary(BaseModel):
    directory: str = Field(..., description="scope 管辖目录，\".\" 表示仓库根目录")
    absolute_path: str = Field(..., description="AI_README.md 的绝对路径")
    content_preview: str = Field(..., description="压缩空白后的内容预览")


class GuidanceResponse(BaseModel):
    scopes: List[GuidanceScopeSummary] = Field(default_factory=list)
    aggregated_guidance: str = ""
    missing_paths: List[str] = Field(default_factory=list)


class UpdateRequest(BaseModel):
    target_dir: str = Field(..., min_length=1, description="待创建或更新的 AI_README.md 所在目录")
    section: str = Field(..., min_length=1, description="要插入或替换的二级标题")
    body: str = Field(..., min_length=1, description="替换该 section 的 Markdown 正文")
    headline: Optional[str] = Field(None, description="一级标题覆盖，仅在缺失一级标题时使用")
    change_summary: Optional[str] = Field(None, description="追加到 Changelog 的变更摘要")
    require_existing: bool = Field(False, description="为真时，文件不存在则报错")

    @field_validator("section")
    @classmethod
    def section_is_single_line_title(cls, v: str) -> str:
        # 写入后必须能被 "## " 标题匹配回来
        if not v.strip():
            raise ValueError("section title must not be blank")
        if "\n" in v or "\r" in v:
            raise ValueError("section title must be a single line")
        return v


class UpdateResponse(BaseModel):
    created: bool
    updated_sections: List[str] = Field(default_factory=list)
    changelog_appended: bool = False
    file_path: str
