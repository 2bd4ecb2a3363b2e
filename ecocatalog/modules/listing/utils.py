from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from ecocatalog.core.logger import get_logger

from .models import Draft, ImageAttachment, MutationRequest


def _row_to_dict(row: pd.Series, defaults: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(defaults)
    data.update({key: value for key, value in row.dropna().items()})
    return data


def _load_images(value: Any, base_dir: Path) -> Tuple[ImageAttachment, ...]:
    """Read the comma separated image paths of a row, relative paths resolved against the CSV's directory"""
    if value is None:
        return ()
    attachments = []
    for path in str(value).split(","):
        path = path.strip()
        if not path:
            continue
        file_path = Path(path)
        if not file_path.is_absolute():
            file_path = base_dir / file_path
        attachments.append(ImageAttachment.from_path(str(file_path)))
    return tuple(attachments)


def load_requests_from_csv(file_path: str,
                           defaults: Optional[Dict[str, Any]] = None) -> List[MutationRequest]:
    """
    Load create requests from a CSV file.
    Expected columns: name, description, category, cost_price, selling_price,
    current_stock, recycled_material_percentage, is_active, images (comma separated local paths)

    Images are uploaded as attachments; rows whose image files cannot be read are skipped.
    """
    logger = get_logger()
    base_dir = Path(file_path).parent
    df = pd.read_csv(file_path)
    requests = []

    for index, row in df.iterrows():
        data = _row_to_dict(row, defaults or {})
        image_paths = data.pop("images", None)
        try:
            draft = Draft.from_dict(data)
            images = _load_images(image_paths, base_dir)
        except (TypeError, ValueError, OSError) as e:
            logger.warning(f"Skipping row {index + 1} of {file_path}: {e}")
            continue
        requests.append(MutationRequest(draft=draft, images=images))

    logger.info(f"Loaded {len(requests)}/{len(df)} rows from {file_path}")
    return requests
