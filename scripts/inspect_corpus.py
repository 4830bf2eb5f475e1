import asyncio
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from news_search.config import settings
from news_search.corpus.provider import JsonFileCorpusProvider
from news_search.search.engine import SearchEngine

async def main():
    path = sys.argv[1] if len(sys.argv) > 1 else settings.corpus_path
    queries = sys.argv[2:]

    print(f"Loading corpus from {path}...")
    engine = SearchEngine(JsonFileCorpusProvider(path))

    if not await engine.build():
        print("Index build failed, see log output.")
        return

    stats = engine.get_stats()
    print(f"Indexed {stats.total_articles} articles, {stats.index_size} tokens.")
    print(f"Sections: {', '.join(engine.get_available_sections())}")
    print(f"Categories: {stats.categories}, tags: {stats.tags}")

    for query in queries:
        print(f"\nQuery: {query!r}")
        results = await engine.search(query)
        if not results:
            print("  No results.")
        for result in results:
            print(f"  {result.score:7.1f}  [{result.article.section_key}] {result.record.title}")

        suggestions = engine.get_suggestions(query)
        if suggestions:
            print(f"  Suggestions: {', '.join(suggestions)}")

if __name__ == "__main__":
    asyncio.run(main())
