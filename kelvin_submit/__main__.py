from kelvin_submit.cli import main

main()
