"""Generate a 9 s synthetic clip for manual `stylerecon analyze` runs (needs ffmpeg on PATH)."""

import argparse
import subprocess
from pathlib import Path


def create_demo_video(output: Path, duration: float = 9.0, size: str = "1280x720", rate: int = 30) -> Path:
    output.parent.mkdir(parents=True, exist_ok=True)
    cmd = [
        "ffmpeg", "-y", "-f", "lavfi", "-i", f"testsrc=duration={duration}:size={size}:rate={rate}",
        "-c:v", "libx264", "-pix_fmt", "yuv420p", str(output),
    ]
    subprocess.run(cmd, check=True, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    return output


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("output", nargs="?", type=Path, default=Path("workspace/videos/demo.mp4"))
    parser.add_argument("--duration", type=float, default=9.0)
    args = parser.parse_args()
    print(f"Created {create_demo_video(args.output, args.duration)}")
