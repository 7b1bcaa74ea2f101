#!/usr/bin/env python3
"""
检查各语言包的键是否一致。

用法:
    python scripts/check_locales.py [locale_dir] [reference_locale]

默认读取项目根目录下的 locale/，以 zh 作为基准语言。
存在缺失或多余的键时以退出码 1 结束。
"""

import sys
from pathlib import Path

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.locale_registry.core.config import get_settings
from src.locale_registry.core.errors import I18nError
from src.locale_registry.core.resolver import LocaleRegistry
from src.locale_registry.services.bundle_loader import BundleLoader
from src.locale_registry.services.locale_audit import audit_registry, format_report
from src.locale_registry.services.registry_logger import setup_logging_from_config


def main():
    setup_logging_from_config(get_settings().logging)

    locale_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else project_root / "locale"
    reference = sys.argv[2] if len(sys.argv) > 2 else "zh"

    loader = BundleLoader(locale_dir)
    registry = LocaleRegistry(default_locale=reference, fallback_locale=None)

    try:
        loaded = loader.load_into(registry)
        diffs = audit_registry(registry, reference)
    except (FileNotFoundError, I18nError) as e:
        print(f"错误: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"已加载语言: {', '.join(loaded)}（基准: {reference}）")
    print(format_report(diffs))

    if any(not d.is_compatible for d in diffs):
        sys.exit(1)


if __name__ == "__main__":
    main()
