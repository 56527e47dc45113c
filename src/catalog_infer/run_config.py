import sys

from catalog_infer.execution.config_executor import ConfigExecutor


def main():
    if len(sys.argv) != 2:
        print("Usage: catalog-infer-config <config.yaml>")
        sys.exit(1)

    config_path = sys.argv[1]
    executor = ConfigExecutor(config_path)
    result = executor.execute()

    print("\n=== Execution Completed ===")
    print(f"Source: {result.get('source')}")
    print(f"Columns: {result.get('column_count')}")
    print(f"Schema hash: {result.get('schema_hash')}")


if __name__ == "__main__":
    main()
