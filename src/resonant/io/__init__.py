from resonant.io.messages import FractalMessage, MessageBoard, MessageType
from resonant.io.preview import render_slice, save_image
from resonant.io.share import (
    ShareDecodeError,
    ShareTokenExpired,
    create_share_url,
    create_temporary_share_token,
    decode_snapshot,
    encode_snapshot,
    parse_share_url,
    validate_share_token,
)
