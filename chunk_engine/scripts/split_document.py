from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path if not already installed
_project_root = Path(__file__).parent.parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from chunk_engine.config.settings import Settings
from chunk_engine.core.document_processor import DocumentProcessor
from chunk_engine.core.document_splitter import DocumentSplitter
from chunk_engine.core.exceptions import ChunkEngineError
from chunk_engine.utils.logging_manager import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Split documents into token-bounded segments (JSON lines)")
    parser.add_argument("--source", required=True, help="Path to a file or a folder")
    parser.add_argument("--mode", choices=["folder", "file"], default=None, help="Defaults to the source type")
    parser.add_argument("--max-tokens", type=int, default=None, help="Override MAX_SEGMENT_SIZE_TOKENS")
    parser.add_argument("--overlap", type=int, default=None, help="Override MAX_OVERLAP_SIZE_TOKENS")
    parser.add_argument(
        "--estimator",
        choices=["tiktoken", "characters", "words"],
        default=None,
        help="Override TOKEN_ESTIMATOR",
    )
    parser.add_argument("--preset", default=None, help="Override SEPARATOR_PRESET (prose, markdown)")
    parser.add_argument(
        "--max-files",
        type=int,
        default=None,
        help="Limit the number of source files to process (folder mode)",
    )
    parser.add_argument("--output", default=None, help="Write JSON lines here instead of stdout")
    args = parser.parse_args()

    load_dotenv()
    settings = Settings()
    setup_logging(settings.log_level)

    overrides = {
        "max_segment_size_tokens": args.max_tokens,
        "max_overlap_size_tokens": args.overlap,
        "token_estimator": args.estimator,
        "separator_preset": args.preset,
    }
    effective = settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})

    try:
        splitter = DocumentSplitter.from_settings(effective)
    except ChunkEngineError as exc:
        parser.error(str(exc))

    mode = args.mode or ("folder" if Path(args.source).is_dir() else "file")
    try:
        docs = DocumentProcessor(mode=mode).process(args.source, max_files=args.max_files)
    except FileNotFoundError as exc:
        parser.error(str(exc))

    out = open(args.output, "w", encoding="utf-8") if args.output else sys.stdout
    try:
        count = 0
        for doc in docs:
            for segment in splitter.split(doc):
                out.write(json.dumps({"text": segment.text, "metadata": dict(segment.metadata)}, ensure_ascii=False))
                out.write("\n")
                count += 1
    finally:
        if out is not sys.stdout:
            out.close()

    print(f"Split {len(docs)} document(s) into {count} segment(s).", file=sys.stderr)


if __name__ == "__main__":
    main()
