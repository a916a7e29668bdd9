"""
Headless demonstration of the live render loop.

Drives the capture -> segment -> composite -> filter pipeline with a
synthetic camera and a stand-in segmentation engine (an ellipse "person" in
the middle of the frame), then writes one PNG per catalog filter and reports
the time per presented frame.

No camera, display or segmentation model is needed:
    python examples/render_loop_demo.py [output_dir]
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import time
import numpy as np

from PB_Libs.CaptureLib.frame_scheduler import ManualFrameScheduler
from PB_Libs.CaptureLib.render_loop import RenderLoop, RenderParams
from PB_Libs.CaptureLib.segmentation import SegmentationAdapter
from PB_Libs.CaptureLib.video_source import FrameSequenceSource
from PB_Libs.ImagingLib.filter_engine import list_filters
from PB_Libs.ImagingLib.frame_models import BlurBackground, Frame, Mask
from PB_Libs.StoreLib.photo_store import encode_png


class EllipseSegmenter:
    """Pretends the person is an ellipse centred in the frame."""

    def segment_person(self, frame):
        height, width = frame.height, frame.width
        ys, xs = np.mgrid[0:height, 0:width]
        inside = ((xs - width / 2) / (width / 4)) ** 2 + ((ys - height / 2) / (height / 2.5)) ** 2 <= 1
        return Mask(inside.astype(np.uint8))


def synthetic_frames(width=640, height=360, count=8):
    """Moving colour gradient standing in for a webcam."""
    ys, xs = np.mgrid[0:height, 0:width]
    frames = []
    for i in range(count):
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :, 0] = (xs + i * 16) % 256
        pixels[:, :, 1] = (ys * 2) % 256
        pixels[:, :, 2] = ((xs + ys) // 3 + i * 8) % 256
        pixels[:, :, 3] = 255
        frames.append(Frame(pixels))
    return frames


def run_filter(descriptor, frames, ticks=10):
    """Run the loop for a number of display frames; returns (last output, seconds/frame)."""
    presented = []
    scheduler = ManualFrameScheduler()
    with RenderLoop(SegmentationAdapter(EllipseSegmenter()), scheduler, presented.append) as loop:
        loop.start(FrameSequenceSource(frames), RenderParams(BlurBackground(), descriptor))
        elapsed = 0.0
        for _ in range(ticks):
            start = time.time()
            scheduler.run_pending()
            elapsed += time.time() - start
            # Let the segmentation worker finish before the next display frame
            time.sleep(0.02)
        output = loop.capture()

    per_frame = elapsed / len(presented) if presented else float("nan")
    return output, per_frame


def main():
    """Render every catalog filter over a blurred background."""
    output_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("render_loop_demo_output")
    output_dir.mkdir(parents=True, exist_ok=True)

    frames = synthetic_frames()
    print(f"Rendering {len(frames)} synthetic frames at {frames[0].width}x{frames[0].height}")
    print("-" * 60)

    for descriptor in list_filters():
        output, per_frame = run_filter(descriptor, frames)
        if output is None:
            print(f"  {descriptor.name:<10} no frame presented")
            continue
        file_name = descriptor.name.replace("&", "and").lower() + ".png"
        (output_dir / file_name).write_bytes(encode_png(output))
        print(f"  {descriptor.name:<10} {per_frame * 1000:6.1f} ms/frame -> {file_name}")

    print(f"\nWrote results to {output_dir.resolve()}")


if __name__ == "__main__":
    main()
