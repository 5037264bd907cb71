from qna_cleanup.main import main

main()
