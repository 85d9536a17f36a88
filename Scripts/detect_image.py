import argparse
import logging

import cv2

from yolo2_kit import DetectorConfig, NodeConfig, draw_detections, load_detector_config, load_pipeline


def main() -> int:
    parser = argparse.ArgumentParser(description="Run a Tiny YOLOv2 grid model on an image and print detections.")
    parser.add_argument("--image", required=True, help="Path to an input image.")
    parser.add_argument("--model", default="Models/tinyyolov2-8.onnx", help="Path to the ONNX model.")
    parser.add_argument("--detector-config", default=None, help="Optional detector geometry JSON (default: Tiny YOLOv2 VOC).")
    parser.add_argument("--conf", type=float, default=0.3, help="Confidence threshold.")
    parser.add_argument("--label", default="person", help="Target label for markers.")
    parser.add_argument("--frame-id", default="camera", help="Frame id stamped on markers.")
    parser.add_argument("--normalize", action="store_true", help="Scale input pixels to 0..1.")
    parser.add_argument(
        "--onnx-providers",
        default=None,
        help='Comma-separated ORT providers, e.g. "CUDAExecutionProvider,CPUExecutionProvider".',
    )
    parser.add_argument("--out", default=None, help="Optional output path for the visualization.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    detector_config = load_detector_config(args.detector_config) if args.detector_config else DetectorConfig.tiny_yolo_voc()
    onnx_providers = None
    if args.onnx_providers:
        onnx_providers = [p.strip() for p in str(args.onnx_providers).split(",") if p.strip()]

    pipeline = load_pipeline(
        args.model,
        detector_config=detector_config,
        node_config=NodeConfig(
            confidence=args.conf,
            label=args.label,
            frame_id=args.frame_id,
            normalize=args.normalize,
        ),
        onnx_providers=onnx_providers,
    )

    image = cv2.imread(args.image)
    if image is None:
        raise FileNotFoundError(f"Could not read image at path: {args.image}")

    result = pipeline(image)
    for det in result.detections:
        print(det.label, f"{det.score:.3f}", det.as_xywh())
    for marker in result.markers:
        print("marker", marker.id, marker.frame_id, marker.position)

    if args.out:
        vis = draw_detections(result.image, result.detections, show_label=True)
        if not cv2.imwrite(args.out, vis):
            raise RuntimeError(f"Failed to write visualization: {args.out}")
        print(f"wrote {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
