from batch_evict.cli import main

main()
