"""
PageCraft 页面排版引擎 - 后端核心模块

模块结构：
- config/       运行期配置与元素模板目录
- models/       数据模型定义（纸张/元素/文档/导出记录）
- geometry/     屏幕坐标与文档坐标转换、网格吸附、边界约束
- stacking/     绘制顺序（z-index）管理
- writer/       PDF页面写入器（基于reportlab）
- export/       绘制操作规划、图表栅格化、二进制/脚本渲染
- pipeline/     导出流水线编排与产物管理
- persistence/  设计文件读写
"""

__version__ = "0.1.0"
