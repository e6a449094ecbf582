"""
Video AI Detection: object detection over local video files.

Starts the web control surface, optionally begins processing a video right
away, and runs the frame presenter on the main thread until interrupted.

Usage:
    python src/main.py --config config/config.yaml --video clip.mp4 --display

Arguments:
    --config: Path to configuration file
    --video: Video file to start processing immediately
    --display: Show annotated frames in an OpenCV window
    --no-web: Do not start the web interface
    --exit-on-complete: Exit once the video has been processed
"""

import argparse
import logging
import os
import sys
import threading
from typing import Any, Dict, List, Optional, Tuple

import uvicorn
import yaml

from models.config import Config
from models.policy import ClassPolicy
from ops.logging import setup_logging, VALID_LOG_LEVELS
from pipeline.controller import create_controller_from_config
from pipeline.sink import FrameChannel
from runtime.context import RuntimeContext
from runtime.presenter import FramePresenter
from web.app import create_app
from web.state import state as web_state


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _config_layers(config_path: str) -> List[str]:
    """default.yaml, then config.yaml, then the requested file, all from one directory."""
    config_dir = os.path.dirname(config_path)
    local_path = os.path.join(config_dir, "config.yaml")
    layers = [os.path.join(config_dir, "default.yaml"), local_path]
    if os.path.abspath(config_path) != os.path.abspath(local_path):
        layers.append(config_path)
    return layers


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Merge the config layers that exist, later ones overriding earlier ones.

    Exits the process if any layer cannot be read or parsed.
    """
    merged: Dict[str, Any] = {}
    try:
        for layer in _config_layers(config_path):
            if not os.path.exists(layer):
                continue
            with open(layer, "r") as f:
                merged = _deep_merge(merged, yaml.safe_load(f) or {})
                logging.debug(f"Loaded config layer {layer}")
    except Exception as e:
        logging.error(f"Could not load configuration from {config_path}: {e}")
        sys.exit(1)
    return merged


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_size(value: Any) -> bool:
    return isinstance(value, list) and len(value) == 2 and all(_is_positive_int(x) for x in value)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['model', 'pipeline', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Model artifacts
    model = config.get('model') or {}
    for key in ('data_dir', 'config_file', 'weights_file', 'names_file'):
        if key in model and (not isinstance(model[key], str) or not model[key]):
            return False, f"model.{key} must be a non-empty string"
    if 'input_size' in model and not _is_size(model['input_size']):
        return False, "model.input_size must be a list of [width, height] positive integers"
    if model.get('backend', 'opencv') not in ('opencv', 'default', 'cuda'):
        return False, "model.backend must be one of: opencv, default, cuda"
    if model.get('target', 'opencl') not in ('cpu', 'opencl', 'opencl_fp16', 'cuda'):
        return False, "model.target must be one of: cpu, opencl, opencl_fp16, cuda"

    # Frame loop
    pipeline = config.get('pipeline') or {}
    if 'frame_skip' in pipeline and not _is_positive_int(pipeline['frame_skip']):
        return False, "pipeline.frame_skip must be a positive integer"
    if 'presentation_size' in pipeline and not _is_size(pipeline['presentation_size']):
        return False, "pipeline.presentation_size must be a list of [width, height] positive integers"
    if 'frame_delay_ms' in pipeline:
        delay = pipeline['frame_delay_ms']
        if not isinstance(delay, (int, float)) or isinstance(delay, bool) or delay < 0:
            return False, "pipeline.frame_delay_ms must be a non-negative number"
    if 'stop_timeout' in pipeline:
        timeout = pipeline['stop_timeout']
        if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
            return False, "pipeline.stop_timeout must be a positive number"
    if 'channel_size' in pipeline and not _is_positive_int(pipeline['channel_size']):
        return False, "pipeline.channel_size must be a positive integer"
    put_timeout = pipeline.get('put_timeout')
    if put_timeout is not None and (not isinstance(put_timeout, (int, float)) or put_timeout <= 0):
        return False, "pipeline.put_timeout must be a positive number"

    # Class policy (optional section)
    detection = config.get('detection') or {}
    valid_policies = [p.value for p in ClassPolicy]
    if 'policy' in detection and detection['policy'] not in valid_policies:
        return False, f"detection.policy must be one of: {', '.join(valid_policies)}"
    if 'allow_list' in detection:
        allow_list = detection['allow_list']
        if not isinstance(allow_list, list) or not all(isinstance(x, str) for x in allow_list):
            return False, "detection.allow_list must be a list of class names"
    nms = detection.get('nms_threshold')
    if nms is not None and (not isinstance(nms, (int, float)) or not (0 < nms <= 1)):
        return False, "detection.nms_threshold must be between 0 and 1"

    # Web (optional section)
    web = config.get('web') or {}
    if 'port' in web and (not _is_positive_int(web['port']) or web['port'] > 65535):
        return False, "web.port must be an integer between 1 and 65535"

    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def build_context(config_dict: Dict[str, Any], config_path: Optional[str] = None) -> RuntimeContext:
    """Wire the channel, controller and web state for a loaded config."""
    config = Config.from_dict(config_dict)
    channel = FrameChannel(maxsize=config.pipeline.channel_size, put_timeout=config.pipeline.put_timeout)
    controller = create_controller_from_config(config, sink=channel, notifier=web_state.notify)

    web_state.set_controller(controller)
    web_state.set_config(config_dict, config_path)

    return RuntimeContext(
        config=config,
        controller=controller,
        channel=channel,
        policy=controller.policy,
        web_state=web_state,
        config_path=config_path,
    )


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Video AI Detection')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--video', type=str, default=None,
                        help='Video file to process immediately')
    parser.add_argument('--display', action='store_true',
                        help='Show annotated frames in an OpenCV window')
    parser.add_argument('--no-web', action='store_true',
                        help='Do not start the web interface')
    parser.add_argument('--exit-on-complete', action='store_true',
                        help='Exit once the video has been processed')
    args = parser.parse_args()

    config_dict = load_config(args.config)

    is_valid, error_msg = validate_config(config_dict)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    setup_logging(config_dict['log_path'], config_dict['log_level'])
    logging.info("Starting Video AI Detection")

    ctx = build_context(config_dict, args.config)
    web_cfg = ctx.config.web
    stop_event = threading.Event()

    if web_cfg.enabled and not args.no_web:
        def run_web_app():
            uvicorn.run(
                create_app(),
                host=web_cfg.host,
                port=web_cfg.port,
                log_level="info",
            )

        web_thread = threading.Thread(target=run_web_app, name="web", daemon=True)
        web_thread.start()
        logging.info(f"Web interface started on port {web_cfg.port}")

    if args.video:
        started = ctx.controller.start(args.video)
        if not started and args.exit_on_complete:
            sys.exit(1)

    if args.exit_on_complete:
        def watch_completion():
            ctx.controller.wait()
            stop_event.set()

        threading.Thread(target=watch_completion, name="completion-watch", daemon=True).start()

    presenter = FramePresenter(ctx.channel, web_state=web_state, display=args.display)
    try:
        presenter.run(stop_event)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
    finally:
        stop_event.set()
        ctx.controller.stop()
        logging.info("Video AI Detection stopped")


if __name__ == "__main__":
    main()
