from tire_intake.cli import main

if __name__ == "__main__":
    main()
