"""
导出设计文件为PDF（可选同时输出构建脚本）。

用法：
    python tools/export_design.py --design design.json --out out/design.pdf --recipe out/design.py
"""

import argparse
import logging
import sys
from pathlib import Path


def _add_backend_to_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    backend_root = repo_root / "backend"
    if str(backend_root) not in sys.path:
        sys.path.insert(0, str(backend_root))


def main() -> int:
    parser = argparse.ArgumentParser(description="Export a saved PageCraft design to PDF.")
    parser.add_argument("--design", required=True, help="设计文件（JSON）")
    parser.add_argument("--out", required=True, help="PDF输出路径")
    parser.add_argument("--recipe", default="", help="可选：构建脚本输出路径")
    parser.add_argument("--config", default="", help="可选：运行期配置YAML")
    args = parser.parse_args()

    _add_backend_to_path()
    from pagecraft.config import get_config, reload_config
    from pagecraft.models import DocumentModel
    from pagecraft.persistence import DesignStore
    from pagecraft.pipeline import ExportPipeline

    config = reload_config(args.config) if args.config else get_config()
    logging.basicConfig(
        level=getattr(logging, config.logging.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    design_path = Path(args.design)
    document = DocumentModel()
    if not DesignStore().load(design_path, document):
        print(f"设计文件加载失败: {design_path}")
        return 1

    pipeline = ExportPipeline(image_base_dir=design_path.parent)
    result = pipeline.export_sync(
        document,
        output_path=Path(args.out),
        recipe_path=Path(args.recipe) if args.recipe else None,
    )

    print(f"PDF: {result.run.artifacts.output_path} ({result.run.artifacts.pdf_size} bytes)")
    if result.run.artifacts.recipe_path:
        print(f"脚本: {result.run.artifacts.recipe_path}")
    for skipped in result.run.skipped_elements:
        print(f"跳过 [{skipped.element_type}] {skipped.element_id}: {skipped.reason}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
