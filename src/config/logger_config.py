from pathlib import Path

from loguru import logger

from src.config.settings import WikiSettings

_settings = WikiSettings.from_env()

log_dir = Path(_settings.log_dir)
log_file = log_dir / "lore_{time}.log"

logger.remove()
logger.add(
    log_file,
    rotation="256 MB",  # 每個檔案滿 256MB 就切分
    retention="10 days",  # 只保留最近 10 天的日誌
    compression="zip",  # 切分後的舊檔案自動壓縮成 zip
    encoding="utf-8",
    level=_settings.log_level,
    delay=True,  # 第一筆日誌寫入時才建立檔案
)
